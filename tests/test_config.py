from __future__ import annotations

from pathlib import Path

import pytest

from staker.config import ConfigError, StakerConfig, config_from_dict, load_config
from staker.core import RecoveryWindowNotElapsed
from staker.core.types import MAX_NOTIFY, RECOVERY_COOLDOWN, SCALE

from tests.helpers import ALICE, DAY, MGMT, RWD, WEEK, add_reward, deposit, make_world, notify


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "staker.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_empty_file_yields_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(_write(tmp_path, ""))
        assert cfg == StakerConfig()
        assert (cfg.scale, cfg.max_notify, cfg.recovery_cooldown) == (SCALE, MAX_NOTIFY, RECOVERY_COOLDOWN)

    def test_overrides(self, tmp_path: Path) -> None:
        cfg = load_config(_write(tmp_path, "schema: staker/config/v1\nrecovery_cooldown: 3600\n"))
        assert cfg.recovery_cooldown == 3600
        assert cfg.scale == SCALE

    def test_unknown_field(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="unknown config field"):
            load_config(_write(tmp_path, "cooldown: 1\n"))

    def test_wrong_type(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="must be an int"):
            load_config(_write(tmp_path, "scale: '1e18'\n"))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_config(_write(tmp_path, "- 1\n- 2\n"))

    def test_bad_schema(self) -> None:
        with pytest.raises(ConfigError, match="schema"):
            config_from_dict({"schema": "staker/config/v9"})

    @pytest.mark.parametrize("field,value", [("scale", 0), ("max_notify", 1), ("recovery_cooldown", -1)])
    def test_out_of_range_values(self, field: str, value: int) -> None:
        with pytest.raises(ConfigError):
            config_from_dict({field: value})


class TestStakerConfig:
    def test_rejects_non_int(self) -> None:
        with pytest.raises(TypeError):
            StakerConfig(scale=1.5)  # type: ignore[arg-type]

    def test_rejects_bool(self) -> None:
        with pytest.raises(TypeError):
            StakerConfig(recovery_cooldown=True)

    def test_custom_cooldown_moves_recovery_window(self) -> None:
        w = make_world(config=StakerConfig(recovery_cooldown=DAY))
        add_reward(w, RWD, WEEK)
        deposit(w, ALICE, 100)
        notify(w, RWD, WEEK)

        w.clock.advance(WEEK + DAY)
        with pytest.raises(RecoveryWindowNotElapsed):
            w.staker.recover(MGMT, RWD, 0)
        w.clock.advance(1)
        assert w.staker.recover(MGMT, RWD, 0) == WEEK
