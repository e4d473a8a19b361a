"""JSON logging setup and regulation_id tagging."""

import logging

import pytest

from sinapse_regulation.logging_config import configure_logging, regulation_log_context


@pytest.fixture
def configured(caplog):
    root = logging.getLogger()
    saved_factory = logging.getLogRecordFactory()
    saved_handlers = list(root.handlers)
    saved_level = root.level

    configure_logging("regulation-service", "dev")
    root.addHandler(caplog.handler)
    yield caplog

    logging.setLogRecordFactory(saved_factory)
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.getLogRecordFactory()("test", logging.INFO, __file__, 1, msg, (), None)


class TestConfigureLogging:
    def test_records_carry_service_and_environment(self, configured):
        record = _record()
        assert record.service == "regulation-service"
        assert record.environment == "dev"
        assert not hasattr(record, "regulation_id")

    def test_dev_logs_debug(self, configured):
        assert logging.getLogger().level == logging.DEBUG

    def test_regulation_id_only_inside_context(self, configured):
        with regulation_log_context("reg-042"):
            inside = _record()
        outside = _record()

        assert inside.regulation_id == "reg-042"
        assert not hasattr(outside, "regulation_id")


class TestWorkflowLogs:
    @pytest.mark.asyncio
    async def test_workflow_update_is_tagged(self, configured, care_team, store, nurse):
        reg_id = store.seed(status="aguardando_transferencia")

        await care_team.confirm_readiness(nurse, reg_id)

        tagged = [r for r in configured.records if getattr(r, "regulation_id", None) == reg_id]
        assert any("team_confirmed" in r.getMessage() for r in tagged)

    @pytest.mark.asyncio
    async def test_publish_failure_log_keeps_tag(
        self, configured, care_team, store, notifier, mock_pubsub, nurse
    ):
        mock_pubsub.publish_regulation_event.side_effect = RuntimeError("pubsub down")
        reg_id = store.seed(status="aguardando_transferencia")

        await care_team.request_relisting(nurse, reg_id, "prazo vencido")
        await notifier.drain()

        failures = [r for r in configured.records if r.getMessage().startswith("Failed to publish")]
        assert failures
        assert all(r.regulation_id == reg_id for r in failures)
