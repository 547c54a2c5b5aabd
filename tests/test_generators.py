from datetime import datetime, timezone
import json
from pathlib import Path
import tempfile
import unittest

from oid_registry.config import default_generator_context
from oid_registry.generators import (
    IMPLEMENTATION_KEYS,
    bundle_filename,
    decode_tag_payload,
    generate_api_headers,
    generate_database_schema,
    generate_fhir_extension,
    generate_implementation,
    generate_mcp_tool,
    generate_tag_payload,
    generate_x509_extension,
    get_implementation,
    render_download_bundle,
    write_download_bundle,
)
from oid_tree.seed import build_seed_tree
from oid_tree.tree import OidNode, find_by_id


FIXED_AT = datetime(2025, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc)


def _context():
    return default_generator_context(generated_at=FIXED_AT)


def _tricky_node() -> OidNode:
    return OidNode(
        id="o-brien-s-lab",
        identifier="1.3.6.1.4.1.61026.9.1",
        name="O'Brien's \"Lab\" $HOME",
        description="Line one\nline 'two'",
        kind="leaf",
        status="experimental",
    )


class GeneratorOutputTests(unittest.TestCase):
    def setUp(self) -> None:
        self.node = find_by_id(build_seed_tree(), "sbs-signer")

    def test_fhir_extension_is_valid_json(self) -> None:
        payload = json.loads(generate_fhir_extension(self.node, _context()))
        extension = payload["extension"][0]

        self.assertEqual(extension["url"], "http://brainsait.com/fhir/StructureDefinition/provenance")
        self.assertEqual(extension["valueIdentifier"]["system"], "urn:oid:1.3.6.1.4.1.61026.3.2.2")
        self.assertEqual(extension["valueIdentifier"]["value"], self.node.name)
        self.assertEqual(extension["valueIdentifier"]["assigner"]["display"], "BrainSAIT Enterprise")

    def test_mcp_tool_name_uses_underscores(self) -> None:
        tool = json.loads(generate_mcp_tool(self.node, _context()))["tools"][0]

        self.assertEqual(tool["name"], "sbs_signer")
        self.assertEqual(tool["description"], self.node.description)
        self.assertEqual(tool["metadata"]["urn"], "urn:oid:1.3.6.1.4.1.61026.3.2.2")
        self.assertEqual(tool["metadata"]["version"], "1.0.0")

    def test_x509_embeds_timestamp_and_section(self) -> None:
        text = generate_x509_extension(self.node, _context())

        self.assertIn("# Generated: 2025-03-04T05:06:07.890Z", text)
        self.assertIn("[ brainsait_extension ]", text)
        self.assertIn("certificatePolicies = 1.3.6.1.4.1.61026.3.2.2", text)
        self.assertIn("1.3.6.1.4.1.61026 = ASN1:UTF8String:BrainSAIT Enterprise", text)

    def test_api_headers_use_prefix_and_base_url(self) -> None:
        text = generate_api_headers(self.node, _context())

        self.assertIn("'X-BrainSAIT-OID': '1.3.6.1.4.1.61026.3.2.2',", text)
        self.assertIn("fetch('https://api.brainsait.com/endpoint', {", text)
        self.assertIn("curl -X POST https://api.brainsait.com/endpoint \\", text)

    def test_database_schema_constrains_namespace(self) -> None:
        text = generate_database_schema(self.node, _context())

        self.assertIn("CREATE TABLE brainsait_assets (", text)
        self.assertIn("CHECK (oid LIKE '1.3.6.1.4.1.61026.%')", text)
        self.assertIn("CREATE INDEX idx_oid ON brainsait_assets(oid);", text)

    def test_tag_payload_fields(self) -> None:
        payload = json.loads(generate_tag_payload(self.node, _context()))

        self.assertEqual(
            payload,
            {
                "oid": "1.3.6.1.4.1.61026.3.2.2",
                "name": self.node.name,
                "issuer": "BrainSAIT Enterprise",
                "pen": "61026",
                "timestamp": "2025-03-04T05:06:07.890Z",
            },
        )

    def test_naive_timestamp_is_treated_as_utc(self) -> None:
        context = default_generator_context(generated_at=datetime(2025, 1, 1, 12, 0, 0))
        payload = json.loads(generate_tag_payload(self.node, context))

        self.assertEqual(payload["timestamp"], "2025-01-01T12:00:00.000Z")


class EscapingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.node = _tricky_node()

    def test_json_outputs_survive_quotes_and_newlines(self) -> None:
        fhir = json.loads(generate_fhir_extension(self.node, _context()))
        mcp = json.loads(generate_mcp_tool(self.node, _context()))

        self.assertEqual(fhir["extension"][0]["valueIdentifier"]["value"], self.node.name)
        self.assertEqual(mcp["tools"][0]["description"], self.node.description)

    def test_sql_literals_double_single_quotes(self) -> None:
        text = generate_database_schema(self.node, _context())

        self.assertIn("  'O''Brien''s \"Lab\" $HOME',", text)
        self.assertIn("line ''two''", text)

    def test_javascript_and_shell_escaping(self) -> None:
        text = generate_api_headers(self.node, _context())

        self.assertIn("'X-BrainSAIT-Service': 'O\\'Brien\\'s \"Lab\" $HOME',", text)
        self.assertIn('-H "X-BrainSAIT-Service: O\'Brien\'s \\"Lab\\" \\$HOME" \\', text)

    def test_config_values_stay_on_one_line(self) -> None:
        text = generate_x509_extension(self.node, _context())

        self.assertIn("UTF8:O'Brien's \"Lab\" \\$HOME", text)
        for line in text.splitlines():
            self.assertNotIn("line 'two'", line)


class RegistryOfImplementationsTests(unittest.TestCase):
    def test_keys_in_display_order(self) -> None:
        self.assertEqual(IMPLEMENTATION_KEYS, ("fhir", "mcp", "x509", "api", "database", "qrcode"))

    def test_unknown_key_raises(self) -> None:
        with self.assertRaises(KeyError):
            get_implementation("yaml")

    def test_generate_implementation_dispatches(self) -> None:
        node = find_by_id(build_seed_tree(), "docker")

        self.assertEqual(
            generate_implementation("mcp", node, _context()),
            generate_mcp_tool(node, _context()),
        )


class BundleTests(unittest.TestCase):
    def test_bundle_sections_and_banners(self) -> None:
        node = find_by_id(build_seed_tree(), "docker")
        text = render_download_bundle(node, _context())
        banner_line = "=" * 60

        self.assertTrue(text.startswith(f"{banner_line}\nFHIR EXTENSION\n{banner_line}\n\n"))
        for title in ["MCP TOOL URN", "X.509 CERTIFICATE", "API HEADERS", "DATABASE SCHEMA", "QR CODE DATA"]:
            self.assertIn(f"\n{banner_line}\n{title}\n{banner_line}\n\n", text)
        self.assertTrue(text.endswith("\n\n"))
        self.assertEqual(text.count("2025-03-04T05:06:07.890Z"), 2)

    def test_bundle_pins_single_timestamp_when_unset(self) -> None:
        node = find_by_id(build_seed_tree(), "docker")
        text = render_download_bundle(node, default_generator_context())

        generated = [line for line in text.splitlines() if line.startswith("# Generated: ")][0]
        stamp = generated[len("# Generated: "):]
        self.assertIn(f'"timestamp": "{stamp}"', text)

    def test_write_bundle_uses_node_id_filename(self) -> None:
        node = find_by_id(build_seed_tree(), "docker")

        with tempfile.TemporaryDirectory() as tmp_dir:
            output_dir = Path(tmp_dir) / "out"
            output_path = write_download_bundle(node, output_dir, _context())

            self.assertEqual(output_path.name, bundle_filename(node))
            self.assertEqual(output_path.name, "docker-implementations.txt")
            self.assertEqual(output_path.read_text(encoding="utf-8"), render_download_bundle(node, _context()))


class DecodeTagPayloadTests(unittest.TestCase):
    def test_decodes_generated_payload(self) -> None:
        node = find_by_id(build_seed_tree(), "docker")
        payload = decode_tag_payload(generate_tag_payload(node, _context()), "1.3.6.1.4.1.61026")

        self.assertEqual(payload.identifier, node.identifier)
        self.assertEqual(payload.name, node.name)
        self.assertEqual(payload.pen, "61026")
        self.assertTrue(payload.in_namespace)

    def test_foreign_identifier_is_flagged(self) -> None:
        payload = decode_tag_payload('{"oid": "2.16.840.1", "name": "HL7"}', "1.3.6.1.4.1.61026")

        self.assertFalse(payload.in_namespace)
        self.assertEqual(payload.issuer, "")
        self.assertIsNone(payload.timestamp)

    def test_rejects_malformed_payloads(self) -> None:
        for text in ["not json", "[1, 2]", '{"oid": 5, "name": "x"}', '{"oid": "1.2"}']:
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    decode_tag_payload(text, "1.3.6.1.4.1.61026")


if __name__ == "__main__":
    unittest.main()
