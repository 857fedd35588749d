"""Tests for the command-line interface."""

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from ts_oas_generator.cli import (
    EXIT_GENERATION_ERROR,
    EXIT_INVALID_JSON,
    EXIT_SUCCESS,
    backup_and_clean_output_dir,
    main,
    parse_command_line_args,
)


@pytest.fixture
def spec_file(tmp_path: Path, users_document: dict[str, Any]) -> Path:
    path = tmp_path / "spec.json"
    path.write_text(json.dumps(users_document), encoding="utf-8")
    return path


class TestArguments:
    """Argument parsing."""

    def test_defaults(self, spec_file: Path) -> None:
        """Test default option values."""
        args = parse_command_line_args([str(spec_file)])
        assert args.output_dir == Path("./generated"), "Default output directory"
        assert args.content_type_maps, "Maps are enabled by default"
        assert not args.force_validation, "Forced validation is off by default"
        assert args.workers == 1, "Single worker by default"
        assert not args.server_wrappers, "Server wrappers are opt-in"

    def test_flags(self, spec_file: Path) -> None:
        """Test that feature flags are parsed."""
        args = parse_command_line_args(
            [str(spec_file), "--no-content-type-maps", "--unknown-response-mode", "--workers", "3", "-v"]
        )
        assert not args.content_type_maps, "--no-content-type-maps disables maps"
        assert args.unknown_response_mode, "--unknown-response-mode is set"
        assert args.workers == 3, "Worker count is parsed"
        assert args.verbose, "-v enables verbose output"

    def test_missing_spec_file(self, tmp_path: Path) -> None:
        """Test that a missing spec file is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            parse_command_line_args([str(tmp_path / "missing.json")])
        assert exc_info.value.code == 2, "argparse errors exit with 2"

    def test_invalid_worker_count(self, spec_file: Path) -> None:
        """Test that zero workers are rejected."""
        with pytest.raises(SystemExit):
            parse_command_line_args([str(spec_file), "--workers", "0"])


class TestMain:
    """End-to-end runs."""

    def test_generates_files(self, spec_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a successful run."""
        output_dir = tmp_path / "out"
        assert main([str(spec_file), "--output", str(output_dir)]) == EXIT_SUCCESS, "Generation should succeed"

        assert (output_dir / "operations" / "createUser.ts").is_file(), "Operation module should be written"
        assert (output_dir / "schemas" / "User.ts").is_file(), "Schema module should be written"
        assert "generated successfully" in capsys.readouterr().out, "Success should be reported"
        assert not (output_dir / "server-operations").exists(), "Server wrappers are not written by default"

    def test_server_wrappers(self, spec_file: Path, tmp_path: Path) -> None:
        """Test that --server-wrappers writes a wrapper module per operation."""
        output_dir = tmp_path / "out"
        exit_code = main([str(spec_file), "-o", str(output_dir), "--server-wrappers"])

        assert exit_code == EXIT_SUCCESS, "Generation should succeed"
        wrapper = output_dir / "server-operations" / "getUser.ts"
        assert wrapper.is_file(), "Server wrapper module should be written"
        assert "export function getUserWrapper(handler: GetUserHandler) {" in wrapper.read_text(encoding="utf-8")
        assert (output_dir / "server-operations" / "index.ts").is_file(), "Server barrel should be written"

    def test_yaml_and_generated_operation_ids(self, tmp_path: Path, users_document: dict[str, Any]) -> None:
        """Test YAML input with operationId synthesis."""
        del users_document["paths"]["/health"]["get"]["operationId"]
        spec_path = tmp_path / "spec.yaml"
        spec_path.write_text(yaml.safe_dump(users_document), encoding="utf-8")
        output_dir = tmp_path / "out"

        exit_code = main([str(spec_path), "-o", str(output_dir), "--generate-operation-ids"])

        assert exit_code == EXIT_SUCCESS, "Generation should succeed"
        assert (output_dir / "operations" / "getHealth.ts").is_file(), "Synthesized id should name the module"

    def test_invalid_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that malformed JSON is reported with its own exit code."""
        spec_path = tmp_path / "spec.json"
        spec_path.write_text("{not json", encoding="utf-8")

        assert main([str(spec_path), "-o", str(tmp_path / "out")]) == EXIT_INVALID_JSON, "Invalid JSON exit code"
        assert "Invalid JSON" in capsys.readouterr().err, "Error should go to stderr"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that malformed YAML shares the invalid input exit code."""
        spec_path = tmp_path / "spec.yml"
        spec_path.write_text("openapi: [unclosed", encoding="utf-8")
        assert main([str(spec_path), "-o", str(tmp_path / "out")]) == EXIT_INVALID_JSON, "Invalid YAML exit code"

    def test_generation_error_restores_output(
        self, tmp_path: Path, users_document: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that failures exit with 3 and keep the previous output."""
        del users_document["paths"]["/health"]["get"]["operationId"]
        spec_path = tmp_path / "spec.json"
        spec_path.write_text(json.dumps(users_document), encoding="utf-8")
        output_dir = tmp_path / "out"
        output_dir.mkdir()
        (output_dir / "keep.ts").write_text("// previous", encoding="utf-8")

        assert main([str(spec_path), "-o", str(output_dir)]) == EXIT_GENERATION_ERROR, "Generation should fail"

        assert (output_dir / "keep.ts").read_text(encoding="utf-8") == "// previous", "Output should be restored"
        assert "operation <anonymous> (GET /health)" in capsys.readouterr().err, "Failing operation is named"

    def test_skip_invalid_operations(self, tmp_path: Path, users_document: dict[str, Any]) -> None:
        """Test that skipping keeps the remaining operations."""
        del users_document["paths"]["/health"]["get"]["operationId"]
        spec_path = tmp_path / "spec.json"
        spec_path.write_text(json.dumps(users_document), encoding="utf-8")
        output_dir = tmp_path / "out"

        exit_code = main([str(spec_path), "-o", str(output_dir), "--skip-invalid-operations"])

        assert exit_code == EXIT_SUCCESS, "Skipping should succeed"
        assert not (output_dir / "operations" / "getHealth.ts").exists(), "Invalid operation is skipped"
        assert (output_dir / "operations" / "getUser.ts").is_file(), "Valid operations are written"


class TestBackupAndCleanOutputDir:
    """Output directory handling."""

    def test_cleans_existing_output(self, tmp_path: Path) -> None:
        """Test that stale files are removed before generation."""
        output_dir = tmp_path / "out"
        output_dir.mkdir()
        (output_dir / "stale.ts").write_text("", encoding="utf-8")

        with backup_and_clean_output_dir(output_dir):
            assert not (output_dir / "stale.ts").exists(), "Stale files should be removed"
        assert output_dir.is_dir(), "Output directory should exist"
