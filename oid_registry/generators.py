"""Integration snippet generators keyed off a single registry node.

Each generator takes a node and an optional ``GeneratorContext`` carrying the namespace
settings. Free text is escaped for the target format: JSON documents are produced with the
``json`` module, SQL literals double their quotes, JavaScript and shell strings are escaped for
their quoting style, and configuration values are collapsed onto one line.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import re
from typing import Optional

from oid_registry.config import default_generator_context
from oid_registry.types import GeneratorContext, Implementation, TagPayload
from oid_tree.identifiers import in_namespace, to_urn
from oid_tree.tree import OidNode


LOGGER = logging.getLogger(__name__)

BANNER_WIDTH = 60
BANNER_CHAR = "="

_WHITESPACE_RE = re.compile(r"\s+")


def _context(context: Optional[GeneratorContext]) -> GeneratorContext:
    return context if context is not None else default_generator_context()


def _timestamp(context: GeneratorContext) -> str:
    moment = context.generated_at or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json_block(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _single_line(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _js_single_quoted(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def _shell_double_quoted(value: str) -> str:
    escaped = value
    for char in ("\\", '"', "$", "`"):
        escaped = escaped.replace(char, f"\\{char}")
    return f'"{escaped}"'


def _config_value(value: str) -> str:
    return _single_line(value).replace("$", "\\$")


def _header_value(value: str) -> str:
    return _single_line(value)


def _extension_section(organization_name: str) -> str:
    words = organization_name.split()
    stem = re.sub(r"[^a-z0-9]+", "_", words[0].lower()).strip("_") if words else ""
    return f"{stem or 'registry'}_extension"


def generate_fhir_extension(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    ctx = _context(context)
    payload = {
        "extension": [
            {
                "url": f"{ctx.fhir_base_url}/StructureDefinition/provenance",
                "valueIdentifier": {
                    "system": to_urn(node.identifier),
                    "value": node.name,
                    "assigner": {"display": ctx.organization_name},
                },
            }
        ]
    }
    return _json_block(payload)


def generate_mcp_tool(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    ctx = _context(context)
    payload = {
        "tools": [
            {
                "name": node.id.replace("-", "_"),
                "description": node.description,
                "inputSchema": {
                    "type": "object",
                    "properties": {},
                    "required": [],
                },
                "metadata": {
                    "urn": to_urn(node.identifier),
                    "provider": ctx.organization_name,
                    "version": "1.0.0",
                },
            }
        ]
    }
    return _json_block(payload)


def generate_x509_extension(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    ctx = _context(context)
    name = _config_value(node.name)
    section = _extension_section(ctx.organization_name)
    return "\n".join(
        [
            "# OpenSSL Configuration Extension",
            f"# Generated: {_timestamp(ctx)}",
            "# Add to openssl.cnf under [v3_req] or [v3_ca]",
            "",
            f"[ {section} ]",
            f"subjectAltName = otherName:{node.identifier};UTF8:{name}",
            f"certificatePolicies = {node.identifier}",
            "",
            "# X.509 Certificate Extension Field",
            f"{ctx.root_prefix} = ASN1:UTF8String:{_config_value(ctx.organization_name)}",
            f"{node.identifier} = ASN1:UTF8String:{name}",
            "",
            "# Generate certificate with:",
            "# openssl req -new -x509 -key private.key \\",
            "#   -out certificate.crt -days 365 \\",
            f"#   -config openssl.cnf -extensions {section}",
        ]
    )


def generate_api_headers(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    ctx = _context(context)
    prefix = ctx.header_prefix
    service = _header_value(node.name)
    provider = _header_value(ctx.organization_name)
    endpoint = f"{ctx.api_base_url}/endpoint"
    return "\n".join(
        [
            "// HTTP Request Headers",
            "const headers = {",
            f"  '{prefix}-OID': {_js_single_quoted(node.identifier)},",
            f"  '{prefix}-Service': {_js_single_quoted(service)},",
            f"  '{prefix}-Provider': {_js_single_quoted(provider)},",
            "  'Content-Type': 'application/json'",
            "}",
            "",
            "// Example usage with fetch",
            f"fetch({_js_single_quoted(endpoint)}, {{",
            "  method: 'POST',",
            "  headers: headers,",
            "  body: JSON.stringify(data)",
            "})",
            "",
            "// Example CURL command",
            f"curl -X POST {endpoint} \\",
            f"  -H {_shell_double_quoted(f'{prefix}-OID: {node.identifier}')} \\",
            f"  -H {_shell_double_quoted(f'{prefix}-Service: {service}')} \\",
            '  -H "Content-Type: application/json" \\',
            "  -d '{\"data\": \"example\"}'",
        ]
    )


def generate_database_schema(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    ctx = _context(context)
    table = ctx.database_table
    metadata = json.dumps({"status": node.status, "description": node.description}, ensure_ascii=False)
    return "\n".join(
        [
            "-- Database Schema with OID Integration",
            f"CREATE TABLE {table} (",
            "  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),",
            f"  oid VARCHAR(255) NOT NULL DEFAULT {_sql_literal(node.identifier)},",
            "  asset_name VARCHAR(255) NOT NULL,",
            "  asset_type VARCHAR(100),",
            "  metadata JSONB,",
            "  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,",
            "",
            f"  CONSTRAINT valid_oid CHECK (oid LIKE {_sql_literal(ctx.root_prefix + '.%')})",
            ");",
            "",
            f"CREATE INDEX idx_oid ON {table}(oid);",
            "",
            "-- Insert example",
            f"INSERT INTO {table} (oid, asset_name, asset_type, metadata)",
            "VALUES (",
            f"  {_sql_literal(node.identifier)},",
            f"  {_sql_literal(node.name)},",
            "  'service',",
            f"  {_sql_literal(metadata)}::jsonb",
            ");",
        ]
    )


def generate_tag_payload(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    ctx = _context(context)
    payload = {
        "oid": node.identifier,
        "name": node.name,
        "issuer": ctx.organization_name,
        "pen": str(ctx.pen) if ctx.pen is not None else None,
        "timestamp": _timestamp(ctx),
    }
    return _json_block(payload)


IMPLEMENTATIONS: tuple[Implementation, ...] = (
    Implementation(
        key="fhir",
        title="FHIR Extension",
        description="HL7 FHIR resource extension for healthcare interoperability",
        language="json",
        generator=generate_fhir_extension,
    ),
    Implementation(
        key="mcp",
        title="MCP Tool URN",
        description="Model Context Protocol tool identifier for AI agents",
        language="json",
        generator=generate_mcp_tool,
    ),
    Implementation(
        key="x509",
        title="X.509 Certificate",
        description="Digital certificate extension for cryptographic signing",
        language="bash",
        generator=generate_x509_extension,
    ),
    Implementation(
        key="api",
        title="API Headers",
        description="HTTP request headers for service identification",
        language="javascript",
        generator=generate_api_headers,
    ),
    Implementation(
        key="database",
        title="Database Schema",
        description="PostgreSQL table with OID integration",
        language="sql",
        generator=generate_database_schema,
    ),
    Implementation(
        key="qrcode",
        title="QR Code Data",
        description="JSON payload for physical asset tagging",
        language="json",
        generator=generate_tag_payload,
    ),
)

IMPLEMENTATION_KEYS: tuple[str, ...] = tuple(impl.key for impl in IMPLEMENTATIONS)


def get_implementation(key: str) -> Implementation:
    for impl in IMPLEMENTATIONS:
        if impl.key == key:
            return impl
    raise KeyError(f"Unknown implementation: {key!r}")


def generate_implementation(key: str, node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    return get_implementation(key).generator(node, context)


def _banner(title: str) -> str:
    line = BANNER_CHAR * BANNER_WIDTH
    return f"{line}\n{title.upper()}\n{line}"


def render_download_bundle(node: OidNode, context: Optional[GeneratorContext] = None) -> str:
    """Concatenate every generator output for node, each under a title banner."""
    ctx = _context(context)
    if ctx.generated_at is None:
        # Pin one timestamp so both time-stamped sections agree.
        ctx = replace(ctx, generated_at=datetime.now(timezone.utc))
    sections = [
        f"{_banner(impl.title)}\n\n{impl.generator(node, ctx)}\n\n"
        for impl in IMPLEMENTATIONS
    ]
    return "\n".join(sections)


def bundle_filename(node: OidNode) -> str:
    return f"{node.id}-implementations.txt"


def write_download_bundle(
    node: OidNode,
    output_dir: Path,
    context: Optional[GeneratorContext] = None,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / bundle_filename(node)
    output_path.write_text(render_download_bundle(node, context), encoding="utf-8")
    LOGGER.info("Implementation bundle written: %s", output_path)
    return output_path


def decode_tag_payload(text: str, root_prefix: str) -> TagPayload:
    """Parse a tagging payload produced by ``generate_tag_payload``.

    Raises ValueError when the text is not a JSON object with string ``oid`` and ``name``.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError("Tag payload is not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise ValueError("Tag payload must be a JSON object.")

    identifier = payload.get("oid")
    name = payload.get("name")
    if not isinstance(identifier, str) or not isinstance(name, str):
        raise ValueError("Tag payload requires string fields 'oid' and 'name'.")

    pen = payload.get("pen")
    timestamp = payload.get("timestamp")
    return TagPayload(
        identifier=identifier,
        name=name,
        issuer=str(payload.get("issuer", "")),
        pen=str(pen) if pen is not None else None,
        timestamp=str(timestamp) if timestamp is not None else None,
        in_namespace=in_namespace(identifier, root_prefix),
    )
