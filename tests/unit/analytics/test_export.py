"""Unit tests for CSV export and display formatting"""
from datetime import datetime, timezone

from rankriot.analytics.export import (
    ISSUES_EXPORT_COLUMNS,
    PAGES_EXPORT_COLUMNS,
    ExportColumn,
    content_disposition,
    export_filename,
    format_boolean_for_export,
    format_date_for_export,
    generate_csv,
)
from rankriot.analytics.formatting import (
    format_bytes,
    format_load_time,
    get_image_filename,
    severity_level,
    severity_style,
    truncate_url,
)


class TestCsv:
    """Tests for CSV generation"""

    def test_quoting(self):
        """Test commas, quotes and newlines are quoted"""
        columns = [ExportColumn("value", "Value")]
        rows = [{"value": "a,b"}, {"value": 'say "hi"'}, {"value": "line\nbreak"}]

        csv_text = generate_csv(rows, columns)

        assert csv_text == 'Value\n"a,b"\n"say ""hi"""\n"line\nbreak"'

    def test_header_only(self):
        """Test an empty export still has its header row"""
        assert generate_csv([], ISSUES_EXPORT_COLUMNS) == "Page URL,Issue Type,Severity,Description,Created At"

    def test_pages_export(self):
        """Test page rows use the pages column set"""
        rows = [{
            "url": "https://example.com/",
            "title": "Home, sweet home",
            "meta_description": None,
            "word_count": 420,
            "http_status": 200,
            "load_time_ms": 812.5,
            "depth": 0,
            "is_indexable": True,
        }]

        lines = generate_csv(rows, PAGES_EXPORT_COLUMNS).split("\n")

        assert lines[0] == "URL,Title,Meta Description,Word Count,HTTP Status,Load Time (ms),Depth,Indexable"
        assert lines[1] == 'https://example.com/,"Home, sweet home",,420,200,812.5,0,Yes'

    def test_issues_export(self):
        """Test issue dates are exported as YYYY-MM-DD"""
        rows = [{
            "page_url": "https://example.com/",
            "issue_type": "missing_title",
            "severity": "critical",
            "description": "Missing page title",
            "created_at": datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc),
        }]
        lines = generate_csv(rows, ISSUES_EXPORT_COLUMNS).split("\n")
        assert lines[1].endswith(",2026-03-14")

    def test_formatters(self):
        """Test boolean and date formatters"""
        assert format_boolean_for_export(False) == "No"
        assert format_boolean_for_export(None) == ""
        assert format_date_for_export("2026-01-02T03:04:05Z") == "2026-01-02"
        assert format_date_for_export(None) == ""

    def test_filename(self):
        """Test the project name becomes an ASCII slug"""
        assert export_filename("My  Site", "pages") == "my-site-pages.csv"
        assert export_filename('My "Best" Shop', "issues") == "my-best-shop-issues.csv"
        assert export_filename("日本 サイト", "pages") == "project-pages.csv"

    def test_content_disposition(self):
        """Test the header carries an ASCII name and the percent-encoded UTF-8 name"""
        header = content_disposition("Café Ünïcode", "pages")

        assert header.startswith('attachment; filename="caf-ncode-pages.csv"; ')
        assert header.endswith("filename*=UTF-8''Caf%C3%A9-%C3%9Cn%C3%AFcode-pages.csv")
        header.encode("latin-1")


class TestFormatting:
    """Tests for display helpers"""

    def test_truncate_url(self):
        """Test absolute URLs show their path"""
        assert truncate_url("https://example.com/blog/post") == "/blog/post"
        assert truncate_url("https://example.com") == "/"
        assert truncate_url("/" + "a" * 60, max_length=10) == "/aaaaaa..."

    def test_format_bytes(self):
        """Test byte sizes pick a readable unit"""
        assert format_bytes(None) == "0 B"
        assert format_bytes(512) == "512 B"
        assert format_bytes(1536) == "1.5 KB"
        assert format_bytes(3 * 1024 * 1024) == "3.0 MB"

    def test_format_load_time(self):
        """Test load times switch to seconds at one second"""
        assert format_load_time(None) == "0ms"
        assert format_load_time(250) == "250ms"
        assert format_load_time(2500) == "2.5s"

    def test_image_filename(self):
        """Test the last path segment is returned"""
        assert get_image_filename("https://cdn.example.com/img/hero.jpg?w=200") == "hero.jpg"
        assert get_image_filename("/static/logo.png") == "logo.png"

    def test_severity(self):
        """Test issue severities map to dashboard levels"""
        assert severity_level("HIGH") == "critical"
        assert severity_level("medium") == "warning"
        assert severity_level(None) == "info"
        assert severity_style("warning")["text"] == "text-orange-700"
