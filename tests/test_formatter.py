"""
Unit tests for response and data formatting.
"""

import json

from ai_cloud_doctor.config.analyzers import get_definition
from ai_cloud_doctor.core.formatter import Section, parse_sections, render
from ai_cloud_doctor.core.prompts import build_system_prompt, build_table_instructions
from ai_cloud_doctor.core.tables import render_data

LAMBDA_RESPONSE = """| Section | Details |
|---------|---------|
| ⚠️ PERFORMANCE ISSUES | • api-handler: p99 duration 9s <br> • worker: cold starts |
| ⚙️ OPTIMIZATIONS | • api-handler: raise memory to 1024MB |
| 💰 COST SAVINGS | Details |
| ⚡ QUICK FIXES | • worker: switch to arm64 <br>  <br> • worker: trim package |
"""


class TestParseSections:
    """Test the pipe-table parser."""

    def test_recognised_sections(self):
        parsed = parse_sections(LAMBDA_RESPONSE, get_definition("lambda").markers)

        assert parsed.unparsed is False
        assert [s.heading for s in parsed.sections] == [
            "⚠️ PERFORMANCE ISSUES", "⚙️ OPTIMIZATIONS", "⚡ QUICK FIXES"
        ]
        assert parsed.sections[0] == Section(
            heading="⚠️ PERFORMANCE ISSUES",
            items=["api-handler: p99 duration 9s", "worker: cold starts"]
        )

    def test_placeholder_and_empty_items_dropped(self):
        parsed = parse_sections(LAMBDA_RESPONSE)
        quick_fixes = parsed.sections[-1]
        assert quick_fixes.items == ["worker: switch to arm64", "worker: trim package"]

    def test_header_row_ignored(self):
        parsed = parse_sections("| Section | Details |\n|---|---|")
        assert parsed.sections == []

    def test_free_text_is_unparsed(self):
        parsed = parse_sections("OpenAI API error: timeout")
        assert parsed.sections == []
        assert parsed.unparsed is True

    def test_empty_text(self):
        parsed = parse_sections("")
        assert parsed.sections == []
        assert parsed.unparsed is False

    def test_none_text(self):
        assert parse_sections(None).sections == []

    def test_marker_without_variation_selector(self):
        parsed = parse_sections("| ⚠ RISK ASSESSMENT | • bucket is public |", ["⚠"])
        assert parsed.sections[0].items == ["bucket is public"]

    def test_lines_without_markers_ignored(self):
        parsed = parse_sections("| RISKS | • something |", ["🚨"])
        assert parsed.unparsed is True

    def test_dash_bullets_and_negative_numbers(self):
        parsed = parse_sections("| 💰 COST | - EC2 <br> -15% on S3 |")
        assert parsed.sections[0].items == ["EC2", "-15% on S3"]


class TestRender:
    """Test console rendering."""

    def test_render_contains_sections(self):
        output = render(LAMBDA_RESPONSE, title="⚡ Lambda Analysis Results")

        assert "Lambda Analysis Results" in output
        assert "PERFORMANCE ISSUES" in output
        assert "worker: cold starts" in output
        assert "COST SAVINGS" not in output
        assert "\x1b[" in output

    def test_unparsed_renders_empty(self):
        assert render("nothing tabular here") == ""

    def test_unparsed_with_title_has_no_sections(self):
        output = render("nothing tabular here", title="Results")
        assert "Results" in output
        assert "nothing tabular" not in output


class TestPrompts:
    """Test prompt construction."""

    def test_table_instructions_list_all_sections(self):
        definition = get_definition("iam")
        instructions = build_table_instructions(definition)

        for section in definition.sections:
            assert f"| {section.heading} |" in instructions
        assert "| Section | Details |" in instructions
        assert "Keep total word count under 400 words." in instructions

    def test_system_prompt_embeds_data(self):
        prompt = build_system_prompt(get_definition("security"), '{"findings": []}')
        assert prompt.startswith("Analyze this AWS Security Hub data")
        assert '{"findings": []}' in prompt


class TestRenderData:
    """Test tables for collected data."""

    def test_cost_table(self):
        data = {
            "start": "2026-09-18", "end": "2026-10-18", "scan_period_days": 30,
            "total": 12.5, "unit": "USD",
            "periods": [{
                "start": "2026-09-18", "end": "2026-10-01", "total": 12.5,
                "services": [
                    {"service": "Amazon EC2", "amount": 10.0, "unit": "USD"},
                    {"service": "AWS Lambda", "amount": 2.5, "unit": "USD"},
                ],
            }],
        }
        output = render_data(json.dumps(data))
        assert "Amazon EC2" in output
        assert "$10.00" in output

    def test_logs_table_with_query(self):
        data = {
            "query": "fields @timestamp",
            "log_groups": [{"name": "/aws/lambda/api", "stored_bytes": 2048, "retention_days": None}],
        }
        output = render_data(json.dumps(data))
        assert "/aws/lambda/api" in output
        assert "Never expires" in output
        assert "fields @timestamp" in output

    def test_lambda_table(self):
        data = {
            "functions": [{
                "name": "api", "runtime": "python3.12", "memory_size": 512, "timeout": 30,
                "architecture": "arm64", "last_modified": "2026-10-01T10:00:00.000+0000", "code_size": 1,
            }],
            "metrics": [{"id": "duration", "label": "Duration", "datapoints": 30, "total": 1.0, "average": 0.1}],
        }
        output = render_data(json.dumps(data))
        assert "python3.12" in output
        assert "30 data points" in output

    def test_generic_json(self):
        output = render_data(json.dumps({"checks": []}))
        assert '"checks"' in output

    def test_error_text_shown(self):
        output = render_data("Error fetching IAM data: denied")
        assert "Error fetching IAM data: denied" in output
