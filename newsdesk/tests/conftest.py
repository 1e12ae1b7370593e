"""
Shared fixtures for newsdesk tests.
"""
import pytest

from newsdesk.config import (
    AirtableConfig,
    BatchConfig,
    RetryPolicy,
    SectionConfig,
    Settings,
    StateConfig,
    SupabaseConfig,
)

ARTICLE_URL = "https://www.diario.com.ar/economia/nota-1"

ARTICLE_HTML = """
<html>
<head>
    <title>Página del diario</title>
    <meta property="og:title" content="El campo anticipa una cosecha récord">
    <meta property="og:description" content="Las entidades rurales estiman un aumento del 20% en la producción de granos.">
    <meta property="og:site_name" content="Diario de Prueba">
    <meta property="og:image" content="https://www.diario.com.ar/img/portada.jpg">
    <meta property="article:published_time" content="2024-03-01T10:00:00-03:00">
</head>
<body>
    <nav><a href="/">Inicio</a><a href="/economia">Economía y finanzas del país</a></nav>
    <article>
        <span class="category">Agro</span>
        <h1>El campo anticipa una cosecha récord</h1>
        <p>Las entidades rurales estiman un fuerte aumento de la producción de granos para esta campaña</p>
        <figure>
            <img src="/img/silos.jpg" alt="Silos en la pampa" width="800" height="600">
            <figcaption>Silos en la región pampeana</figcaption>
        </figure>
        <p>Los productores destacan las lluvias de los últimos meses como factor determinante</p>
        <p>El gobierno evalúa medidas para acompañar la comercialización de la cosecha</p>
        <blockquote class="instagram-media" data-instgrm-permalink="https://www.instagram.com/p/C1a2b3c4/"></blockquote>
        <img src="/img/logo-diario.png" alt="logo">
    </article>
    <footer><p>Todos los derechos reservados por el diario de prueba</p></footer>
</body>
</html>
"""


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with no AI providers, no sinks and no retry delays."""
    return Settings(
        llm_providers=[],
        airtable=AirtableConfig(enabled=False),
        supabase=SupabaseConfig(enabled=False),
        retry=RetryPolicy(base_delay_seconds=0, max_delay_seconds=0, jitter_seconds=0, call_delay_seconds=0),
        batch=BatchConfig(max_concurrent_articles=3),
        state=StateConfig(enabled=True, state_dir=str(tmp_path / "state")),
    )


@pytest.fixture
def section() -> SectionConfig:
    return SectionConfig(
        id="agro",
        name="Agro",
        table_name="Agro",
        feed_url="https://rss.example.com/agro.json",
    )


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def article_url() -> str:
    return ARTICLE_URL
