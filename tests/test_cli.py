from contextlib import redirect_stderr, redirect_stdout
import io
import json
import os
from pathlib import Path
import subprocess
import sys
import tempfile
from unittest.mock import patch
import unittest

from oid_registry.main import (
    EXIT_INPUT_ERROR,
    EXIT_IO_ERROR,
    EXIT_NOT_FOUND,
    EXIT_OK,
    EXIT_SERVICE_ERROR,
    run_cli,
)
from oid_registry.store import JsonFileStore, load_registry_tree
from oid_tree.tree import find_by_id


PROJECT_ROOT = Path(__file__).resolve().parent.parent


class _FakeLLMClient:
    def __init__(self, payload: str) -> None:
        self.payload = payload

    def chat_completion(self, **kwargs):  # noqa: ANN003
        return self.payload


def _suggestion_payload() -> str:
    return json.dumps(
        {
            "suggestions": [
                {"name": "Claims Auditor", "description": "Audits claims.", "useCases": ["audit"], "kind": "leaf"},
                {"name": "Claims Archive", "description": "Archives claims.", "useCases": [], "kind": "leaf"},
                {"name": "Claims Labs", "description": "Claims research.", "useCases": [], "kind": "branch"},
            ]
        }
    )


def _run_module(args: list[str], env: dict[str, str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "oid_registry.main", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.store_path = self.tmp_dir / "store.json"
        env_patch = patch.dict(
            os.environ,
            {"OID_REGISTRY_ENV_FILE": str(self.tmp_dir / "missing.env")},
            clear=True,
        )
        env_patch.start()
        self.addCleanup(env_patch.stop)
        self.addCleanup(self._tmp.cleanup)

    def _run(self, *args: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = run_cli(["--log-level", "WARNING", "--store", str(self.store_path), *args])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_show_prints_seed_tree(self) -> None:
        code, stdout, _ = self._run("show", "--depth", "1")

        self.assertEqual(code, EXIT_OK)
        self.assertIn("OID Tree: BRAINSAIT LTD (22 nodes, 13 leaves)", stdout)
        self.assertFalse(self.store_path.exists())

    def test_show_node_as_json(self) -> None:
        code, stdout, _ = self._run("show", "--node", "docker", "--json")

        self.assertEqual(code, EXIT_OK)
        self.assertEqual(json.loads(stdout)["oid"], "1.3.6.1.4.1.61026.4.2")

    def test_unknown_node_returns_not_found(self) -> None:
        code, _, stderr = self._run("path", "missing")

        self.assertEqual(code, EXIT_NOT_FOUND)
        self.assertIn("Node not found: missing", stderr)

    def test_search_and_path(self) -> None:
        code, stdout, _ = self._run("search", "61026.3.2")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("4 match(es)", stdout)

        code, stdout, _ = self._run("path", "sbs-signer")
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(len(stdout.splitlines()), 4)

    def test_inspect_identifier(self) -> None:
        code, stdout, _ = self._run("inspect", "1.3.6.1.4.1.61026.4.2")

        self.assertEqual(code, EXIT_OK)
        self.assertIn("pen:          61026", stdout)
        self.assertIn("registered:   docker", stdout)

        code, _, _ = self._run("inspect", "1.x")
        self.assertEqual(code, EXIT_INPUT_ERROR)

    def test_add_persists_node(self) -> None:
        code, stdout, _ = self._run(
            "add",
            "--parent",
            "root",
            "--name",
            "Test Module",
            "--description",
            "x",
            "--use-case",
            "demo",
        )

        self.assertEqual(code, EXIT_OK)
        self.assertIn("1.3.6.1.4.1.61026.5", stdout)
        persisted = load_registry_tree(JsonFileStore(self.store_path))
        self.assertEqual(find_by_id(persisted, "test-module").use_cases, ("demo",))

        code, stdout, _ = self._run("show", "--node", "test-module")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Test Module [leaf, active]", stdout)

    def test_add_validation_error(self) -> None:
        code, _, stderr = self._run("add", "--parent", "root", "--name", " ", "--description", "x")

        self.assertEqual(code, EXIT_INPUT_ERROR)
        self.assertIn("Name is required", stderr)
        self.assertFalse(self.store_path.exists())

    def test_generate_single_format(self) -> None:
        code, stdout, _ = self._run("generate", "docker", "--format", "mcp")

        self.assertEqual(code, EXIT_OK)
        self.assertIn('"name": "docker"', stdout)
        self.assertNotIn("CREATE TABLE", stdout)

    def test_export_writes_bundle(self) -> None:
        output_dir = self.tmp_dir / "exports"
        code, _, _ = self._run("export", "docker", "--output-dir", str(output_dir))

        self.assertEqual(code, EXIT_OK)
        text = (output_dir / "docker-implementations.txt").read_text(encoding="utf-8")
        self.assertIn("QR CODE DATA", text)

    def test_scan_payload_file(self) -> None:
        payload_path = self.tmp_dir / "tag.json"
        payload_path.write_text(json.dumps({"oid": "1.3.6.1.4.1.61026.4.2", "name": "Docker Infrastructure"}), encoding="utf-8")

        code, stdout, _ = self._run("scan", str(payload_path))
        self.assertEqual(code, EXIT_OK)
        self.assertIn("(docker)", stdout)

        payload_path.write_text(json.dumps({"oid": "1.3.6.1.4.1.61026.9", "name": "Ghost"}), encoding="utf-8")
        code, stdout, _ = self._run("scan", str(payload_path))
        self.assertEqual(code, EXIT_NOT_FOUND)

    def test_reset_restores_seed(self) -> None:
        self._run("add", "--parent", "root", "--name", "Temp", "--description", "x")

        code, _, _ = self._run("reset")

        self.assertEqual(code, EXIT_OK)
        self.assertIsNone(find_by_id(load_registry_tree(JsonFileStore(self.store_path)), "temp"))

    def test_suggest_without_api_key_is_input_error(self) -> None:
        code, _, stderr = self._run("suggest", "--parent", "healthcare-platform", "--use-case", "claims")

        self.assertEqual(code, EXIT_INPUT_ERROR)
        self.assertIn("OPENAI_API_KEY", stderr)

    def test_suggest_and_accept(self) -> None:
        client = _FakeLLMClient(_suggestion_payload())
        with patch("oid_registry.main.build_suggestion_client_from_config", return_value=(client, "gpt-test")):
            code, stdout, _ = self._run(
                "suggest",
                "--parent",
                "healthcare-platform",
                "--use-case",
                "claims",
                "--accept",
                "1",
            )

        self.assertEqual(code, EXIT_OK)
        self.assertIn("1. Claims Auditor [leaf]", stdout)
        node = find_by_id(load_registry_tree(JsonFileStore(self.store_path)), "claims-auditor")
        self.assertEqual(node.identifier, "1.3.6.1.4.1.61026.3.2.4")

    def test_suggest_accept_out_of_range(self) -> None:
        client = _FakeLLMClient(_suggestion_payload())
        with patch("oid_registry.main.build_suggestion_client_from_config", return_value=(client, "gpt-test")):
            code, _, _ = self._run("suggest", "--parent", "root", "--use-case", "claims", "--accept", "4")

        self.assertEqual(code, EXIT_INPUT_ERROR)
        self.assertFalse(self.store_path.exists())

    def test_suggest_service_failure(self) -> None:
        with patch(
            "oid_registry.main.build_suggestion_client_from_config",
            return_value=(_FakeLLMClient("not json"), "gpt-test"),
        ):
            code, _, stderr = self._run("suggest", "--parent", "root", "--use-case", "claims")

        self.assertEqual(code, EXIT_SERVICE_ERROR)
        self.assertIn("Failed to get suggestions", stderr)

    def test_unreadable_store_path_is_io_error(self) -> None:
        self.store_path = self.tmp_dir

        code, _, stderr = self._run("show")

        self.assertEqual(code, EXIT_IO_ERROR)
        self.assertIn("Failed to read registry store", stderr)

    def test_module_entrypoint_runs(self) -> None:
        env = dict(os.environ)
        result = _run_module(["--store", str(self.store_path), "show", "--depth", "0"], env)

        self.assertEqual(result.returncode, 0, msg=result.stderr)
        self.assertIn("OID Tree: BRAINSAIT LTD", result.stdout)

    def test_unknown_format_is_rejected_by_parser(self) -> None:
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as ctx:
                run_cli(["--store", str(self.store_path), "generate", "docker", "--format", "yaml"])

        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
