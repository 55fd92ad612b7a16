"""Server-wide constants."""

PROJECT_NAME = "Venture-AI"
API_V1_STR = "/api/v1"
