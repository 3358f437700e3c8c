"""
Storage API.

Exposes S3-compatible object storage as a container/file API, with containers
mapped either to real buckets or to key prefixes inside one fixed bucket.
"""
