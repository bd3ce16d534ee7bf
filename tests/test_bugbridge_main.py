"""main 조립 테스트"""

from unittest.mock import MagicMock

from bugbridge import main
from bugbridge.config import Config


class TestBuildSchedulers:
    def test_one_pairing_per_component_set(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Config.reporter, "component_sets", [["SDN"], ["Networking", "DNS"]])
        monkeypatch.setattr(Config.reporter, "sync_interval", 60)

        result = main.build_schedulers(MagicMock(), MagicMock(), main.StateStore(tmp_path))

        assert [s.reporter.state_key for s in result] == [
            "new-bug-reporter.state-SDN",
            "new-bug-reporter.state-DNS-Networking",
        ]
        for scheduler in result:
            assert scheduler.interval_sec == 60
            # 리포터와 재조정 루프가 같은 레지스트리를 공유
            assert scheduler.reconciler.registry is scheduler.reporter.registry
        assert result[0].reporter.registry is not result[1].reporter.registry

    def test_stop_all(self, monkeypatch):
        scheduler = MagicMock()
        monkeypatch.setattr(main, "schedulers", [scheduler])

        main.stop_all()

        scheduler.stop.assert_called_once()
        scheduler.reconciler.stop.assert_called_once()
