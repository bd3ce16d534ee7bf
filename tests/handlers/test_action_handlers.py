"""가져가기 액션 핸들러 등록 테스트"""

from unittest.mock import MagicMock

from bugbridge.handlers.actions import register_action_handlers


def _scheduler(action_id):
    scheduler = MagicMock()
    scheduler.reporter.action_id = action_id
    return scheduler


class TestRegisterActionHandlers:
    def _register(self, action_ids):
        app = MagicMock()
        listeners = {}

        def action(action_id):
            def decorator(func):
                listeners[action_id] = func
                return func
            return decorator

        app.action.side_effect = action
        claim_handler = MagicMock()
        register_action_handlers(app, {
            "claim_handler": claim_handler,
            "schedulers": [_scheduler(a) for a in action_ids],
        })
        return listeners, claim_handler

    def test_one_listener_per_reporter(self):
        listeners, _ = self._register([
            "new-bugs-reporter/take-SDN",
            "new-bugs-reporter/take-Networking",
        ])
        assert set(listeners) == {
            "new-bugs-reporter/take-SDN",
            "new-bugs-reporter/take-Networking",
        }

    def test_ack_before_handle(self):
        listeners, claim_handler = self._register(["new-bugs-reporter/take-SDN"])
        order = []
        ack = MagicMock(side_effect=lambda: order.append("ack"))
        claim_handler.handle.side_effect = lambda body: order.append("handle")
        body = {"actions": [{"value": "{}"}]}

        listeners["new-bugs-reporter/take-SDN"](ack=ack, body=body)

        assert order == ["ack", "handle"]
        claim_handler.handle.assert_called_once_with(body)
