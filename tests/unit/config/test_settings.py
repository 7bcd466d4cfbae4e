import pytest

from stepchain.config.settings import StepchainSettings


class DescribeStepchainSettings:
    @pytest.fixture(autouse=True)
    def clean_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        for name in ("DEBUG", "LOG_LEVEL", "SERIALIZE_LOGS", "YIELD_ON_LOOP"):
            monkeypatch.delenv(f"STEPCHAIN_{name}", raising=False)

    def it_has_sensible_defaults(self) -> None:
        settings = StepchainSettings()

        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.serialize_logs is False
        assert settings.yield_on_loop is True

    def it_reads_prefixed_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STEPCHAIN_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("STEPCHAIN_YIELD_ON_LOOP", "false")
        monkeypatch.setenv("STEPCHAIN_SERIALIZE_LOGS", "1")

        settings = StepchainSettings()

        assert settings.log_level == "DEBUG"
        assert settings.yield_on_loop is False
        assert settings.serialize_logs is True

    def it_reads_a_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("STEPCHAIN_DEBUG=true\n")

        assert StepchainSettings().debug is True

    def it_rejects_unknown_log_levels(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STEPCHAIN_LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError):
            StepchainSettings()
