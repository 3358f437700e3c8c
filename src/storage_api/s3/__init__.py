"""Thin helpers around the boto3 S3 client, grouped by CRUD verb."""
