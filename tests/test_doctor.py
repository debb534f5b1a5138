from signspider.workflows.doctor import build_doctor_report, format_doctor_report
from signspider.workflows.spider_config import CrawlConfig


def _check(report, name):
    return next(check for check in report["checks"] if check["name"] == name)


def test_doctor_reports_writable_cache(tmp_path):
    config = CrawlConfig(cache_folder=tmp_path / "cache")

    report = build_doctor_report(config, data_path=tmp_path / "out" / "data.json")

    assert _check(report, "cache_folder")["status"] == "ok"
    assert _check(report, "data_path")["status"] == "ok"
    assert report["config"]["cache_ttl_ms"] == 604_800_000


def test_doctor_flags_unusable_cache_folder(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    config = CrawlConfig(cache_folder=blocker / "cache")

    report = build_doctor_report(config)

    assert _check(report, "cache_folder")["status"] == "missing"
    assert report["ok"] is False
    assert "remedy:" in format_doctor_report(report)


def test_doctor_without_cache_is_informational():
    report = build_doctor_report(CrawlConfig())
    check = _check(report, "cache_folder")
    assert check["level"] == "info"
    assert format_doctor_report(report).startswith("signspider doctor")
