"""CLI smoke tests."""

import json

import pytest

from sourcerer.cli import main


class TestPluginsCommand:
    def test_list(self, capsys):
        assert main(["plugins"]) == 0
        out = capsys.readouterr().out
        for name in ("types", "zod", "kysely", "hono"):
            assert name in out

    def test_info(self, capsys):
        assert main(["plugins", "--info", "queries"]) == 0
        out = capsys.readouterr().out
        assert "kysely" in out
        assert "KyselyPlugin" in out

    def test_info_unknown(self, capsys):
        assert main(["plugins", "--info", "drizzle"]) == 1
        assert "not registered" in capsys.readouterr().out


class TestGenerateCommand:
    def test_writes_files(self, snapshot_file, tmp_path):
        out_dir = tmp_path / "out"
        code = main([
            "generate", str(snapshot_file),
            "--output-dir", str(out_dir),
            "--plugin", "types", "--plugin", "zod",
        ])

        assert code == 0
        assert (out_dir / "types.ts").exists()
        assert 'from "./types.js"' in (out_dir / "schemas.ts").read_text()

    def test_dry_run_writes_nothing(self, snapshot_file, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main([
            "generate", str(snapshot_file), "--output-dir", str(out_dir),
            "--plugin", "types", "--dry-run",
        ])

        assert code == 0
        assert not out_dir.exists()
        assert "types.ts" in capsys.readouterr().out

    def test_config_file(self, snapshot_file, tmp_path):
        config_path = tmp_path / "sourcerer.json"
        config_path.write_text(json.dumps({
            "output_dir": "gen",
            "plugins": ["types", "kysely"],
        }))

        code = main(["generate", str(snapshot_file), "--config", str(config_path)])

        assert code == 0
        queries = (tmp_path / "gen" / "user" / "queries.ts").read_text()
        assert 'import { db } from "../../db.js";' in queries

    def test_verbose_shows_metadata(self, snapshot_file, tmp_path, capsys):
        code = main([
            "generate", str(snapshot_file), "--output-dir", str(tmp_path / "out"),
            "--plugin", "types", "--verbose",
        ])
        assert code == 0
        assert "Symbol Count" in capsys.readouterr().out

    def test_pipeline_failure(self, snapshot_file, tmp_path, capsys):
        code = main([
            "generate", str(snapshot_file), "--output-dir", str(tmp_path / "out"),
            "--plugin", "hono",
        ])
        assert code == 1
        assert "UnsatisfiedRequirement" in capsys.readouterr().out
        assert not (tmp_path / "out").exists()

    def test_missing_input(self, capsys):
        assert main(["generate"]) == 1
        assert "Input source required" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert main(["generate", str(tmp_path / "nope.json")]) == 1

    def test_bad_config(self, snapshot_file, tmp_path):
        assert main(["generate", str(snapshot_file), "--config", str(tmp_path / "x.json")]) == 1


class TestTopLevel:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "sourcerer 0.1.0" in capsys.readouterr().out
