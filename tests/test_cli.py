"""Unit tests for the command-line entry point."""

import json

import pytest

from rocketsim.cli import DEFAULT_PRESET, EXIT_INVALID_MISSION, EXIT_OK, build_parser, main


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        """Without a source the two-stage preset is flown at 5 ms."""
        args = build_parser().parse_args([])
        assert args.preset is None
        assert DEFAULT_PRESET == "pathfinder"
        assert args.mission is None
        assert args.dt == 0.005
        assert args.max_time == 600.0
        assert not args.j2

    def test_preset_choices(self):
        """Unknown presets are rejected."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--preset", "saturn-v"])

    def test_preset_and_mission_exclusive(self):
        """A preset and a mission file cannot both be given."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--preset", "pathfinder", "--mission", "m.json"])


class TestMain:
    """Test end-to-end CLI runs."""

    def test_preset_run(self, capsys):
        """A preset flight prints a summary and exits cleanly."""
        code = main(["--preset", "single-stage", "--dt", "0.01"])
        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "FLIGHT SUMMARY: Single-Stage Sounder" in out
        assert "LIFTOFF" in out.upper()

    def test_export(self, tmp_path):
        """--export writes the trajectory and summary."""
        out_dir = tmp_path / "run"
        code = main(["--preset", "single-stage", "--dt", "0.01", "--export", str(out_dir)])
        assert code == EXIT_OK
        assert (out_dir / "trajectory.csv").exists()
        assert (out_dir / "summary.json").exists()

    def test_mission_file(self, tmp_path, capsys):
        """A JSON mission file is flown by name."""
        path = tmp_path / "demo.json"
        path.write_text(json.dumps({
            "name": "Demo",
            "stages": [{"name": "S1", "dry_mass": 20, "propellant_mass": 10, "thrust": 2000, "isp": 220}],
        }))
        assert main(["--mission", str(path), "--dt", "0.01"]) == EXIT_OK
        assert "FLIGHT SUMMARY: Demo" in capsys.readouterr().out

    def test_invalid_mission(self, tmp_path):
        """An invalid mission file exits with code 1."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"stages": [{"name": "S1", "dry_mass": -1}]}))
        assert main(["--mission", str(path)]) == EXIT_INVALID_MISSION

    def test_malformed_mission(self, tmp_path):
        """Malformed JSON exits with code 1."""
        path = tmp_path / "broken.json"
        path.write_text("{")
        assert main(["--mission", str(path)]) == EXIT_INVALID_MISSION

    def test_missing_mission(self, tmp_path):
        """A missing mission file exits with code 1."""
        assert main(["--mission", str(tmp_path / "nope.json")]) == EXIT_INVALID_MISSION

    def test_invalid_step(self):
        """A non-positive step exits with code 1."""
        assert main(["--preset", "single-stage", "--dt=-1"]) == EXIT_INVALID_MISSION

    def test_non_utf8_mission(self, tmp_path):
        """A binary mission file exits with code 1."""
        path = tmp_path / "binary.json"
        path.write_bytes(b'{"name": "\xff\xfe"}')
        assert main(["--mission", str(path)]) == EXIT_INVALID_MISSION

    def test_preset_named_with_mission_rejected(self):
        """Naming the default preset alongside a file is still a conflict."""
        with pytest.raises(SystemExit):
            main(["--preset", "pathfinder", "--mission", "m.json"])
