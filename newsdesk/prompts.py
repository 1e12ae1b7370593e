"""
Prompt templates for the AI rewrite and metadata stages.
"""

# Source text is truncated before being embedded in a prompt
MAX_PROMPT_TEXT_LENGTH = 5000

REWRITE_SYSTEM_PROMPT = (
    "Sos un redactor de un medio digital argentino. Reelaborás noticias en "
    "español rioplatense formal, con tono neutral y objetivo."
)

REWRITE_PROMPT = """Reelaborar la siguiente noticia siguiendo estas pautas:

1. **Lenguaje**: español rioplatense formal, adecuado para un contexto periodístico. Tono profesional y respetuoso.

2. **Objetividad**: tono neutral. No incluir juicios de valor, opiniones personales ni lenguaje tendencioso. Presentar los hechos de manera clara y precisa.

3. **Claridad**: lenguaje sencillo y accesible, sin tecnicismos innecesarios. Oraciones cortas y directas.

4. **Estructura**:
   - Dividir el texto en secciones con al menos 2 subtítulos en formato ## Subtítulo.
   - Párrafos cortos separados por una línea en blanco.
   - No concluir con expresiones como "en resumen", "en conclusión" o "en síntesis".

5. **Formato**:
   - Incluir al menos una lista con viñetas usando exactamente este formato:
     - Primer punto clave
     - Segundo punto clave
   - Usar **negritas** para resaltar información importante.
   - Usar *cursivas* al menos una vez.
   - Si hay citas textuales, usar el formato > Cita textual.

6. **Fuentes**: si la noticia original incluye fuentes, citarlas. Si no, evitar especulaciones.

7. **Salida**:
   - Devolver la noticia ÚNICAMENTE en formato Markdown, sin backticks ni bloques de código.
   - No incluir un título principal (# Título); comenzar directamente con el cuerpo del texto.
   - No incluir imágenes ni enlaces.

8. **Palabras prohibidas**: fusionar, fusionándose, reflejar, reflejándose, sumergir, sumergirse, en resumen, conclusión, en síntesis, markdown.

{images_block}

Texto extraído: "{text}"
"""

IMAGES_PREAMBLE = (
    "Las siguientes imágenes acompañan al artículo original. Tenelas en cuenta "
    "para el contexto, pero no las incluyas en el texto:"
)

METADATA_PROMPT = """Texto extraído: "{text}"

Basado en el texto anterior, genera lo siguiente:
1. Un título conciso y atractivo. No uses mayúsculas en todas las palabras (evita el title case). Solo usa mayúsculas al principio del título y en nombres propios.
2. Un resumen (bajada) de 40 a 50 palabras que capture los puntos clave. Solo usa mayúsculas al principio de cada oración y en nombres propios.
3. Una volanta corta que brinde contexto o destaque la importancia del artículo. Solo usa mayúsculas al principio y en nombres propios.

Devolvé únicamente un objeto JSON con este formato:
{{
  "title": "Título generado",
  "bajada": "Resumen de 40 a 50 palabras",
  "volanta": "Volanta generada"
}}
"""


def build_rewrite_prompt(text: str, images_block: str = "") -> str:
    """Rewrite prompt for an article body, with an optional image description block."""
    if images_block:
        images_block = f"{IMAGES_PREAMBLE}\n\n{images_block}"
    return REWRITE_PROMPT.format(text=text[:MAX_PROMPT_TEXT_LENGTH], images_block=images_block)


def build_metadata_prompt(text: str) -> str:
    """Title/bajada/volanta prompt for an article body."""
    return METADATA_PROMPT.format(text=text[:MAX_PROMPT_TEXT_LENGTH])
