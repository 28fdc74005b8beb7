"""
Configuration Test Suite
"""

import pytest

from quiz_explorer.config import DEFAULT_BLOCKED_HOSTS, ExplorerConfig


class TestExplorerConfig:
    def test_defaults(self):
        config = ExplorerConfig.from_env(env={})
        assert config.max_artifacts is None
        assert config.capture_pages == ("e-mail",)
        assert config.stall_limit == 2
        assert config.blocked_hosts == DEFAULT_BLOCKED_HOSTS
        assert config.resume is True

    def test_values_from_environment(self):
        config = ExplorerConfig.from_env(
            env={
                "QUIZ_START_URL": "https://quiz.example.com/start",
                "QUIZ_HEADLESS": "true",
                "QUIZ_MAX_ARTIFACTS": "5",
                "QUIZ_CAPTURE_PAGES": "e-mail, thanks",
                "QUIZ_ROOT_PAGE_ID": "Start",
                "QUIZ_RESUME": "no",
                "UNRELATED": "ignored",
            }
        )
        assert config.start_url == "https://quiz.example.com/start"
        assert config.headless is True
        assert config.max_artifacts == 5
        assert config.capture_pages == ("e-mail", "thanks")
        assert config.root_page_id == "start"
        assert config.resume is False

    def test_empty_max_artifacts_means_unbounded(self):
        assert ExplorerConfig.from_env(env={"QUIZ_MAX_ARTIFACTS": ""}).max_artifacts is None

    def test_invalid_values_are_reported_together(self):
        with pytest.raises(ValueError) as excinfo:
            ExplorerConfig.from_env(env={"QUIZ_STALL_LIMIT": "0", "QUIZ_RETRY_ATTEMPTS": "0"})
        assert "stall_limit" in str(excinfo.value)
        assert "retry_attempts" in str(excinfo.value)

    def test_non_numeric_value(self):
        with pytest.raises(ValueError):
            ExplorerConfig.from_env(env={"QUIZ_NAVIGATION_TIMEOUT_MS": "soon"})

    def test_overrides_skip_none(self):
        config = ExplorerConfig.from_env(env={"QUIZ_MAX_ARTIFACTS": "5"})
        updated = config.with_overrides(max_artifacts=None, state_file="other.json")
        assert updated.max_artifacts == 5
        assert updated.state_file == "other.json"
        assert config.state_file == "exploration_state.json"

    def test_overrides_are_validated(self):
        with pytest.raises(ValueError):
            ExplorerConfig().with_overrides(max_artifacts=-1)

    def test_page_ids_are_lower_cased(self):
        config = ExplorerConfig.from_env(env={"QUIZ_CAPTURE_PAGES": "E-mail, Thanks", "QUIZ_ROOT_PAGE_ID": "Section-Intro"})
        assert config.capture_pages == ("e-mail", "thanks")
        assert config.root_page_id == "section-intro"

    def test_blocked_hosts_keep_their_case(self):
        config = ExplorerConfig.from_env(env={"QUIZ_BLOCKED_HOSTS": "https://Tracker.example/"})
        assert config.blocked_hosts == ("https://Tracker.example/",)
