import json

import pytest

from newsdesk.config import SectionConfig, Settings
from newsdesk.main import dry_run_report, parse_args, select_sections
from newsdesk.pipeline import BatchResult, FailedItem


def make_settings() -> Settings:
    return Settings(
        _env_file=None,
        sections=[
            SectionConfig(id="deportes", name="Deportes", table_name="Deportes", priority=2),
            SectionConfig(id="agro", name="Agro", table_name="Agro", priority=1),
            SectionConfig(id="archivo", name="Archivo", table_name="Archivo", enabled=False),
        ],
    )


def test_parse_args():
    args = parse_args(["--section", "agro", "--section", "deportes", "--limit", "5", "--dry-run"])

    assert args.section == ["agro", "deportes"]
    assert args.limit == 5
    assert args.dry_run is True
    assert args.all is False
    assert args.url is None


def test_parse_args_rejects_unknown_log_level():
    with pytest.raises(SystemExit):
        parse_args(["--log-level", "VERBOSE"])


def test_select_all_sections_by_priority():
    sections = select_sections(make_settings(), None, run_all=True)

    assert [section.id for section in sections] == ["agro", "deportes"]


def test_select_named_sections():
    sections = select_sections(make_settings(), ["deportes"], run_all=False)

    assert [section.id for section in sections] == ["deportes"]
    assert select_sections(make_settings(), None, run_all=False) == []


def test_select_unknown_section():
    with pytest.raises(ValueError):
        select_sections(make_settings(), ["policiales"], run_all=False)


def test_dry_run_report_lists_failures():
    result = BatchResult(failed=[FailedItem(url="https://diario.com.ar/a", error_type="FetchError", reason="HTTP 404")])

    report = json.loads(dry_run_report([result]))

    assert report == {
        "articles": [],
        "failed": [{"url": "https://diario.com.ar/a", "error_type": "FetchError", "reason": "HTTP 404"}],
    }
