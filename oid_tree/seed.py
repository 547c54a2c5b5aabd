"""Default registry hierarchy used when no persisted tree exists."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from oid_tree.identifiers import DEFAULT_ROOT_PREFIX
from oid_tree.tree import OidNode
from oid_tree.visualizer import node_from_dict


ROOT_NODE_ID = "root"


def _seed_rows(root_prefix: str) -> dict[str, Any]:
    return {
        "id": ROOT_NODE_ID,
        "oid": root_prefix,
        "name": "BRAINSAIT LTD",
        "description": (
            "IANA Private Enterprise Number (PEN) for BrainSAIT Limited. "
            "Root of all organizational identifiers."
        ),
        "type": "root",
        "status": "active",
        "useCases": [
            "Global Organization ID for all API headers",
            "Root namespace for all enterprise systems",
            "Digital identity foundation for regulatory compliance",
        ],
        "children": [
            {
                "id": "geo",
                "oid": f"{root_prefix}.1",
                "name": "Geographic Operations",
                "description": "Location-based operational divisions and IoT sensor networks across BrainSAIT deployments.",
                "type": "branch",
                "status": "active",
                "useCases": [
                    "Prefix for location-based IoT sensors",
                    "Geographic routing for distributed systems",
                    "Regional compliance and data sovereignty",
                ],
                "children": [
                    {
                        "id": "riyadh",
                        "oid": f"{root_prefix}.1.1",
                        "name": "Riyadh Operations",
                        "description": "Saudi Arabia headquarters and primary healthcare operations center.",
                        "type": "leaf",
                        "status": "active",
                        "useCases": [
                            "NPHIES integration endpoint identifier",
                            "Saudi Billing System (SBS) deployment tag",
                        ],
                    },
                    {
                        "id": "sudan",
                        "oid": f"{root_prefix}.1.2",
                        "name": "Sudan Operations",
                        "description": "Sudan regional office and healthcare service delivery.",
                        "type": "leaf",
                        "status": "active",
                        "useCases": [
                            "Regional healthcare system identifier",
                            "Local compliance tracking",
                        ],
                    },
                ],
            },
            {
                "id": "org",
                "oid": f"{root_prefix}.2",
                "name": "Organization Structure",
                "description": "Internal organizational hierarchy, departments, and governance structures.",
                "type": "branch",
                "status": "active",
                "useCases": [
                    "Metadata for internal RBAC (Role-Based Access Control)",
                    "Department and team identification",
                    "Audit trail for organizational actions",
                ],
                "children": [
                    {
                        "id": "departments",
                        "oid": f"{root_prefix}.2.1",
                        "name": "Departments",
                        "description": "Organizational departments and business units.",
                        "type": "branch",
                        "status": "active",
                        "children": [
                            {
                                "id": "engineering",
                                "oid": f"{root_prefix}.2.1.1",
                                "name": "Engineering",
                                "description": "Software development and infrastructure engineering.",
                                "type": "leaf",
                                "status": "active",
                            },
                            {
                                "id": "healthcare",
                                "oid": f"{root_prefix}.2.1.2",
                                "name": "Healthcare Operations",
                                "description": "Clinical operations and healthcare service delivery.",
                                "type": "leaf",
                                "status": "active",
                            },
                        ],
                    },
                    {
                        "id": "licensing",
                        "oid": f"{root_prefix}.2.2",
                        "name": "Licensing & Compliance",
                        "description": "Software licensing, compliance tracking, and intellectual property management.",
                        "type": "leaf",
                        "status": "active",
                        "useCases": [
                            "Creative Commons (CC BY-NC-SA 4.0) compliance tracking",
                            "Software licensing token generation",
                            "Automated compliance-as-code workflows",
                        ],
                    },
                ],
            },
            {
                "id": "products",
                "oid": f"{root_prefix}.3",
                "name": "Products & Services",
                "description": "Product lines, service offerings, and platform deployments.",
                "type": "branch",
                "status": "active",
                "useCases": [
                    "Namespace for FHIR Extensions",
                    "MCP Toolset identification",
                    "Product version and instance tracking",
                ],
                "children": [
                    {
                        "id": "cms",
                        "oid": f"{root_prefix}.3.1",
                        "name": "Content Management System",
                        "description": "CMS platform and related services.",
                        "type": "branch",
                        "status": "active",
                        "children": [
                            {
                                "id": "cms-summary",
                                "oid": f"{root_prefix}.3.1.1",
                                "name": "Clinical Summary Tool",
                                "description": "MCP tool for generating clinical summaries.",
                                "type": "leaf",
                                "status": "active",
                                "examples": {"mcp": f"urn:oid:{root_prefix}.3.1.1"},
                            },
                        ],
                    },
                    {
                        "id": "healthcare-platform",
                        "oid": f"{root_prefix}.3.2",
                        "name": "Healthcare Platform",
                        "description": "Integrated healthcare technology suite including SBS and NPHIES integration.",
                        "type": "branch",
                        "status": "active",
                        "children": [
                            {
                                "id": "ai-normalizer",
                                "oid": f"{root_prefix}.3.2.1",
                                "name": "AI Normalizer Service",
                                "description": "AI-powered clinical coding and claim normalization engine.",
                                "type": "leaf",
                                "status": "active",
                                "useCases": [
                                    "FHIR resource custom extensions for AI provenance",
                                    "Claim processing audit trail",
                                    "AI model version tracking",
                                ],
                                "examples": {
                                    "fhir": f"{root_prefix}.3.2.1",
                                    "api": f"X-BrainSAIT-Service: {root_prefix}.3.2.1",
                                },
                            },
                            {
                                "id": "sbs-signer",
                                "oid": f"{root_prefix}.3.2.2",
                                "name": "Signer Microservice",
                                "description": "Cryptographic signing service for NPHIES claims.",
                                "type": "leaf",
                                "status": "active",
                                "useCases": [
                                    "X.509 certificate Subject Alternative Name",
                                    "Digital signature provenance for claims",
                                    "Cryptographic identity binding",
                                ],
                                "examples": {
                                    "x509": f"SubjectAltName: OID.{root_prefix}.3.2.2",
                                    "api": f"X-BrainSAIT-Signer: {root_prefix}.3.2.2",
                                },
                            },
                            {
                                "id": "nphies-connector",
                                "oid": f"{root_prefix}.3.2.3",
                                "name": "NPHIES Integration Connector",
                                "description": (
                                    "Saudi NPHIES (National Platform for Health Insurance Exchange Services) "
                                    "integration layer."
                                ),
                                "type": "leaf",
                                "status": "active",
                                "examples": {
                                    "fhir": f"{root_prefix}.3.2.3",
                                    "api": f"X-BrainSAIT-Connector: {root_prefix}.3.2.3",
                                },
                            },
                        ],
                    },
                    {
                        "id": "ai-agents",
                        "oid": f"{root_prefix}.3.3",
                        "name": "AI Agent Framework",
                        "description": "Multi-agent AI systems and MCP servers.",
                        "type": "branch",
                        "status": "experimental",
                        "children": [
                            {
                                "id": "crewai",
                                "oid": f"{root_prefix}.3.3.1",
                                "name": "CrewAI Agents",
                                "description": "CrewAI-based multi-agent orchestration.",
                                "type": "leaf",
                                "status": "experimental",
                                "examples": {"mcp": f"urn:oid:{root_prefix}.3.3.1"},
                            },
                            {
                                "id": "n8n",
                                "oid": f"{root_prefix}.3.3.2",
                                "name": "n8n Automation",
                                "description": "Workflow automation and agent orchestration via n8n.",
                                "type": "leaf",
                                "status": "experimental",
                                "examples": {"mcp": f"urn:oid:{root_prefix}.3.3.2"},
                            },
                        ],
                    },
                ],
            },
            {
                "id": "infrastructure",
                "oid": f"{root_prefix}.4",
                "name": "Infrastructure & Assets",
                "description": "Physical and virtual infrastructure, hardware assets, and deployment environments.",
                "type": "branch",
                "status": "active",
                "useCases": [
                    "QR code generation for physical assets",
                    "RFID tagging for hardware inventory",
                    "Container and VM instance identification",
                ],
                "children": [
                    {
                        "id": "ollama",
                        "oid": f"{root_prefix}.4.1",
                        "name": "Ollama Private Cloud",
                        "description": "Local LLM deployment infrastructure.",
                        "type": "leaf",
                        "status": "active",
                    },
                    {
                        "id": "docker",
                        "oid": f"{root_prefix}.4.2",
                        "name": "Docker Infrastructure",
                        "description": "Containerized service deployments.",
                        "type": "leaf",
                        "status": "active",
                    },
                ],
            },
        ],
    }


@lru_cache(maxsize=8)
def build_seed_tree(root_prefix: str = DEFAULT_ROOT_PREFIX) -> OidNode:
    """Return the default registry tree rooted at root_prefix.

    The result is cached per prefix.
    """
    return node_from_dict(_seed_rows(root_prefix))
