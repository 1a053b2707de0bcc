"""
Unit tests for the analysis pipeline.

Collectors and the completion client are replaced with fakes; the job
ledger lives in a temporary directory.
"""

import json
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

from ai_cloud_doctor.analyzers import (
    analyze_cost,
    analyze_iam,
    analyze_lambda,
    analyze_logs,
    analyze_security_hub,
    analyze_terraform,
    analyze_trusted_advisor,
)
from ai_cloud_doctor.config.loader import AppConfig, AwsCredentials
from ai_cloud_doctor.detectors.live import LiveStatus
from ai_cloud_doctor.sdk.openai_client import CompletionResponse
from ai_cloud_doctor.storage.repository import JobRepository

LIVE = LiveStatus(live=True)
OFFLINE = LiveStatus(live=False)
CONFIG = AppConfig(
    openai_key="sk-test",
    aws_credentials=AwsCredentials("AKIATEST", "SECRETTEST"),
    offline=False
)
NO_KEY = AppConfig(aws_credentials=AwsCredentials("AKIATEST", "SECRETTEST"), offline=False)

IAM_RESPONSE = """| Section | Details |
|---------|---------|
| 🚨 SECURITY RISKS | • alice: console access without MFA |
| 🔑 ACCESS ISSUES | Details |
| 💡 RECOMMENDATIONS | • deployer: scope down AdministratorAccess |
| ⚡ IMMEDIATE ACTIONS | • alice: enable MFA |
"""


class FakeClient:
    """Completion client stand-in recording its prompts."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    def ask(self, system, user):
        self.calls.append((system, user))
        return self.response


class AnalyzerTestCase:
    """Temporary ledger shared by analyzer tests."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.repository = JobRepository(Path(self.temp_dir) / "jobs.json")

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def factory(self, response):
        self.client = FakeClient(response)
        return lambda config: self.client


class TestOfflineAnalyzers(AnalyzerTestCase):
    """Offline mode returns canned text without AWS or OpenAI calls."""

    def test_cost_offline(self):
        with patch('ai_cloud_doctor.collectors.base.subprocess.run') as mock_run:
            result = analyze_cost(CONFIG, OFFLINE, repository=self.repository)
            mock_run.assert_not_called()

        assert result.startswith("### Cost\n")
        assert "No live AWS credentials" in result
        assert self.repository.read_all() == []

    def test_lambda_offline(self):
        result = analyze_lambda(CONFIG, OFFLINE, repository=self.repository)
        assert "Offline mode: supply logs/metrics export" in result
        assert self.repository.read_all() == []

    def test_iam_offline(self):
        assert analyze_iam(CONFIG, OFFLINE).startswith("### IAM\n")

    def test_advisor_and_security_offline(self):
        assert analyze_trusted_advisor(CONFIG, OFFLINE).startswith("### Trusted Advisor")
        assert analyze_security_hub(CONFIG, OFFLINE).startswith("### Security Hub")

    def test_logs_offline_proposes_query(self):
        result = analyze_logs(CONFIG, OFFLINE, "payment failures", repository=self.repository)

        assert result.startswith("### Logs\n")
        assert "**Proposed Logs Insights query:**" in result
        assert "| filter @message like /payment failures/" in result
        assert "| stats count() by bin(60s)" in result
        assert self.repository.read_all() == []

    def test_logs_offline_default_question(self):
        assert "/recent errors/" in analyze_logs(CONFIG, OFFLINE)


class TestMissingKey(AnalyzerTestCase):
    """Live analyzers need an API key."""

    def test_cost_without_key(self):
        with patch('ai_cloud_doctor.collectors.base.subprocess.run') as mock_run:
            result = analyze_cost(NO_KEY, LIVE, repository=self.repository)
            mock_run.assert_not_called()

        assert result == "### Cost\nOpenAI API key missing; cannot perform Cost analysis."
        assert self.repository.read_all() == []

    def test_logs_without_key(self):
        result = analyze_logs(NO_KEY, LIVE)
        assert "cannot perform Logs analysis" in result


class TestLiveAnalysis(AnalyzerTestCase):
    """Full collect, ask, render and record cycle."""

    def test_iam_analysis(self):
        response = CompletionResponse(
            content=IAM_RESPONSE, input_tokens=1500, output_tokens=200, cached_tokens=1024, model="gpt-5-nano"
        )
        with patch('ai_cloud_doctor.analyzers.aws.IamCollector.collect', return_value='{"users": []}'):
            result = analyze_iam(
                CONFIG, LIVE, repository=self.repository, client_factory=self.factory(response)
            )

        jobs = self.repository.read_all()
        assert len(jobs) == 1
        job = jobs[0]
        assert job.name == "iam-analysis"
        assert job.input_tokens == 1500
        assert job.cached_tokens == 1024
        assert job.model == "gpt-5-nano"
        assert job.cost > 0

        assert result.startswith("### IAM\n")
        assert f"Tokens: 1500 in, 200 out, 1024 cached | Job: {job.id}" in result
        assert "alice: enable MFA" in result
        assert "ACCESS ISSUES" not in result

        system, user = self.client.calls[0]
        assert '{"users": []}' in system
        assert "| 🚨 SECURITY RISKS |" in system
        assert user.startswith("Analyze IAM users, roles, and policies")

    def test_question_forwarded(self):
        response = CompletionResponse(content=IAM_RESPONSE)
        with patch('ai_cloud_doctor.analyzers.aws.SecurityHubCollector.collect', return_value="{}"):
            analyze_security_hub(
                CONFIG, LIVE, "which buckets are public?",
                repository=self.repository, client_factory=self.factory(response)
            )
        assert self.client.calls[0][1] == "which buckets are public?"

    def test_provider_error_is_shown_and_recorded(self):
        response = CompletionResponse.failure("OpenAI API error: rate limited")
        with patch('ai_cloud_doctor.analyzers.aws.CostCollector.collect', return_value="{}"):
            result = analyze_cost(
                CONFIG, LIVE, repository=self.repository, client_factory=self.factory(response)
            )

        assert "OpenAI API error: rate limited" in result
        job = self.repository.read_all()[-1]
        assert job.total_tokens == 0
        assert job.cost == 0.0

    def test_collector_error_still_asks(self):
        response = CompletionResponse(content=IAM_RESPONSE)
        with patch('ai_cloud_doctor.analyzers.aws.LambdaCollector.collect',
                   return_value="Error fetching AWS Lambda data: denied"):
            result = analyze_lambda(
                CONFIG, LIVE, repository=self.repository, client_factory=self.factory(response)
            )

        assert "Error fetching AWS Lambda data: denied" in self.client.calls[0][0]
        assert "Error fetching AWS Lambda data: denied" in result

    def test_logs_question_prefixed(self):
        response = CompletionResponse(content="")
        with patch('ai_cloud_doctor.analyzers.logs.LogsCollector.collect', return_value='{"log_groups": []}'):
            analyze_logs(
                CONFIG, LIVE, "timeouts in checkout",
                repository=self.repository, client_factory=self.factory(response)
            )
        assert self.client.calls[0][1] == "Question: timeouts in checkout"
        assert self.repository.read_all()[-1].name == "logs-analysis"


class TestTerraformAnalysis(AnalyzerTestCase):
    """Plan-file analysis works with or without AWS."""

    def test_no_plan(self):
        result = analyze_terraform(CONFIG, None, repository=self.repository)
        assert result == "### Terraform\nNo plan provided; skipping detailed TF analysis."
        assert self.repository.read_all() == []

    def test_unreadable_plan(self):
        missing = str(Path(self.temp_dir) / "absent.json")
        result = analyze_terraform(CONFIG, missing, repository=self.repository)
        assert result == f"### Terraform\nUnable to read Terraform plan file at {missing}."

    def test_invalid_plan(self):
        plan_path = Path(self.temp_dir) / "plan.json"
        plan_path.write_text("{oops", encoding="utf-8")
        result = analyze_terraform(CONFIG, str(plan_path))
        assert "Invalid JSON in Terraform plan file" in result

    def test_plan_without_key(self):
        plan_path = Path(self.temp_dir) / "plan.json"
        plan_path.write_text("{}", encoding="utf-8")
        result = analyze_terraform(AppConfig(), str(plan_path))
        assert result == "### Terraform\nOpenAI API key missing; cannot perform Terraform analysis."

    def test_plan_analysis(self):
        plan_path = Path(self.temp_dir) / "plan.json"
        plan = {"resource_changes": [
            {"address": "aws_db_instance.main", "type": "aws_db_instance", "change": {"actions": ["delete"]}},
        ]}
        plan_path.write_text(json.dumps(plan), encoding="utf-8")
        response = CompletionResponse(
            content="| ⚠️ RISK ASSESSMENT | • aws_db_instance.main: data loss on delete |",
            input_tokens=300, output_tokens=40
        )

        result = analyze_terraform(
            AppConfig(openai_key="sk-test"), str(plan_path),
            repository=self.repository, client_factory=self.factory(response)
        )

        assert '"total_changes": 1' in self.client.calls[0][0]
        assert "data loss on delete" in result
        assert self.repository.read_all()[-1].name == "terraform-analysis"
