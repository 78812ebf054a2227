"""Configuration and inventory file schemas for carousel."""

DURATION_PATTERN = r"^\s*\d+\s*[smhdwy]\s*$"

CREDENTIAL_TYPES = ["certificate", "ssh", "rsa", "password", "user", "value", "json"]

POLICY_SCHEMA = {
    "type": "object",
    "properties": {
        "regeneration": {
            "type": "object",
            "properties": {
                "older_than": {
                    "type": "string",
                    "pattern": DURATION_PATTERN,
                    "description": "Regenerate latest versions older than this",
                },
                "expires_within": {
                    "type": "string",
                    "pattern": DURATION_PATTERN,
                    "description": "Regenerate certificates expiring within this",
                },
                "ignore_update_mode": {
                    "type": "boolean",
                    "default": False,
                },
            },
            "additionalProperties": False,
        },
        "filters": {
            "type": "object",
            "properties": {
                "types": {
                    "type": "array",
                    "items": {"type": "string", "enum": CREDENTIAL_TYPES},
                },
                "deployments": {
                    "type": "array",
                    "items": {"type": "string", "minLength": 1},
                },
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}

CREDENTIAL_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": CREDENTIAL_TYPES},
        "version_created_at": {"description": "ISO-8601 string, or a timestamp YAML has already parsed"},
        "transitional": {"type": "boolean"},
        "certificate_authority": {"type": "boolean"},
        "self_signed": {"type": "boolean"},
        "expiry_date": {"description": "ISO-8601 string, or a timestamp YAML has already parsed"},
        "signed_by": {"type": ["string", "null"]},
        "signing": {"type": ["boolean", "null"]},
        "subject": {"type": ["string", "null"]},
        "issuer": {"type": ["string", "null"]},
        "subject_key_id": {"type": ["string", "null"]},
        "authority_key_id": {"type": ["string", "null"]},
        "ca_key_ids": {"type": "array", "items": {"type": "string"}},
        "value": {
            "type": "object",
            "properties": {
                "certificate": {"type": ["string", "null"]},
                "ca": {"type": ["string", "null"]},
                "ca_name": {"type": ["string", "null"]},
            },
        },
    },
    "required": ["id", "name", "type"],
}

VARIABLE_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string", "minLength": 1},
        "deployment": {"type": "string", "minLength": 1},
        "definition": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "type": {"type": "string"},
                "update_mode": {
                    "type": "string",
                    "enum": ["converge", "no-overwrite"],
                },
                "options": {"type": "object"},
            },
        },
    },
    "required": ["name", "deployment"],
}

INVENTORY_SCHEMA = {
    "type": "object",
    "properties": {
        "credentials": {"type": "array", "items": CREDENTIAL_SCHEMA},
        "variables": {"type": "array", "items": VARIABLE_SCHEMA},
    },
    "required": ["credentials"],
}
