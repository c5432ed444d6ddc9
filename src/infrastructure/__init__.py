"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Object storage (S3/R2) via boto3
- scratch: Local scratch files
- background: Worker pool for off-request uploads
"""
