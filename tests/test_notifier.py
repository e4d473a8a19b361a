import pytest

from sinapse_regulation.notifications.notifier import RegulationNotifier


class TestRegulationNotifier:
    @pytest.mark.asyncio
    async def test_publishes_event_payload(self, notifier, mock_pubsub):
        notifier.notify(
            "status_changed",
            regulation_id="reg-001",
            patient_id="pat-001",
            actor_id="nir-001",
            payload={"status": "regulado"},
        )
        await notifier.drain()

        event = mock_pubsub.publish_regulation_event.call_args[0][0]
        assert event["event_type"] == "status_changed"
        assert event["regulation_id"] == "reg-001"
        assert event["actor_id"] == "nir-001"
        assert event["status"] == "regulado"
        assert "timestamp" in event

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_fail_write(
        self, care_team, store, notifier, mock_pubsub, nurse
    ):
        mock_pubsub.publish_regulation_event.side_effect = RuntimeError("pubsub down")
        reg_id = store.seed(status="aguardando_transferencia")

        regulation = await care_team.confirm_readiness(nurse, reg_id)
        await notifier.drain()

        assert regulation.team_confirmed_by == "nurse-001"
        assert store.docs[reg_id]["team_confirmed_by"] == "nurse-001"

    @pytest.mark.asyncio
    async def test_without_pubsub_is_noop(self):
        notifier = RegulationNotifier(None)
        notifier.notify("status_changed", regulation_id="r", patient_id="p", actor_id="a")
        await notifier.drain()
