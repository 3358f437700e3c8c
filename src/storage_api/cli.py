# cli.py
import logging
import sys

import click

from storage_api.adapter import StorageAdapter
from storage_api.errors import ProviderError
from storage_api.settings import get_settings

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the Storage API"""
    logging.basicConfig(level=get_settings().log_level)


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Storage Mode: {settings.storage_mode}")
    print(f"  S3 Bucket: {settings.s3_bucket_name or '(one bucket per container)'}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  List Page Size: {settings.list_page_size}")
    print(f"  Upload Part Size: {settings.upload_part_size}")
    print(f"  Log Level: {settings.log_level}")


@cli.command()
def containers():
    """List containers"""
    adapter = StorageAdapter(get_settings())
    try:
        for container in adapter.get_containers():
            print(container.name)
    except ProviderError as e:
        print(f"❌ Failed to list containers: {e.status_code} {e.message}")
        sys.exit(1)


@cli.command()
@click.argument("container")
def files(container):
    """List the files of CONTAINER"""
    adapter = StorageAdapter(get_settings())
    try:
        for f in adapter.get_files(container):
            print(f"{f.last_modified.isoformat()}  {f.size:>12}  {f.name}")
    except ProviderError as e:
        print(f"❌ Failed to list files of {container}: {e.status_code} {e.message}")
        sys.exit(1)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
def serve(host, port):
    """Run the API with uvicorn"""
    import uvicorn

    from storage_api.main import create_app

    uvicorn.run(create_app(get_settings()), host=host, port=port)


if __name__ == "__main__":
    cli()
