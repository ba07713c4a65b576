"""Command-line interface for user-storage.

Commands:
    - get: Print a presigned download URL for an object
    - put: Upload a local file to an object
    - remove: Delete an object
    - list: List objects under a path

Credentials come from a Cognito identity pool (--identity-pool-id), from
explicit keys (--identity-id with --access-key-id/--secret-access-key), or
from the AWS credential chain (--identity-id, optionally --aws-profile).
"""

import asyncio
from pathlib import Path
from typing import Annotated, Literal, Optional

import typer

from . import __version__
from .core.exceptions import ValidationError
from .identity import (
    CognitoIdentityProvider,
    CredentialProvider,
    SessionCredentialProvider,
    StaticCredentialProvider,
)
from .storage import StorageFacade

app = typer.Typer(
    name="user-storage",
    help="Per-identity object storage on top of S3.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"user-storage {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    User-Storage: get, put, remove and list objects by access level.
    """
    pass


BucketOption = Annotated[str, typer.Option("--bucket", "-b", help="S3 bucket name")]
RegionOption = Annotated[
    Optional[str], typer.Option("--region", help="AWS region name")
]
EndpointOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]
LevelOption = Annotated[
    Literal["public", "private"],
    typer.Option("--level", "-l", help="Access level: public or private"),
]
IdentityPoolOption = Annotated[
    Optional[str],
    typer.Option("--identity-pool-id", help="Cognito identity pool ID"),
]
IdentityIdOption = Annotated[
    Optional[str],
    typer.Option("--identity-id", help="Identity ID used for private objects"),
]
AccessKeyOption = Annotated[
    Optional[str], typer.Option("--access-key-id", help="AWS access key ID")
]
SecretKeyOption = Annotated[
    Optional[str], typer.Option("--secret-access-key", help="AWS secret access key")
]
SessionTokenOption = Annotated[
    Optional[str], typer.Option("--session-token", help="AWS session token")
]
ProfileOption = Annotated[
    Optional[str], typer.Option("--aws-profile", help="AWS CLI profile name")
]


def _create_credential_provider(
    identity_pool_id: Optional[str] = None,
    identity_id: Optional[str] = None,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    aws_profile: Optional[str] = None,
    region_name: Optional[str] = None,
) -> CredentialProvider:
    """Create a credential provider from whichever source was given."""
    if identity_pool_id:
        return CognitoIdentityProvider(identity_pool_id, region_name=region_name)

    if not identity_id:
        raise ValidationError("Either --identity-pool-id or --identity-id is required")

    if access_key_id or secret_access_key:
        if not (access_key_id and secret_access_key):
            raise ValidationError(
                "--access-key-id and --secret-access-key must be given together"
            )
        if aws_profile:
            raise ValidationError(
                "--aws-profile cannot be combined with explicit access keys"
            )
        return StaticCredentialProvider(
            identity_id=identity_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
        )

    if session_token:
        raise ValidationError(
            "--session-token requires --access-key-id and --secret-access-key"
        )

    return SessionCredentialProvider(identity_id, aws_profile=aws_profile)


def _create_facade(
    bucket: str,
    region_name: Optional[str],
    endpoint_url: Optional[str],
    provider: CredentialProvider,
) -> StorageFacade:
    return StorageFacade(
        {"bucket": bucket, "region": region_name, "endpoint_url": endpoint_url},
        credential_provider=provider,
    )


@app.command("get")
def get_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    bucket: BucketOption,
    level: LevelOption = "public",
    expires: Annotated[
        Optional[int],
        typer.Option("--expires", help="URL lifetime in seconds"),
    ] = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointOption = None,
    identity_pool_id: IdentityPoolOption = None,
    identity_id: IdentityIdOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Print a presigned download URL for an object.

    Example:
        user-storage get avatar.png --bucket user-files --level private \
            --identity-pool-id us-east-1:0000-pool
    """
    try:
        provider = _create_credential_provider(
            identity_pool_id=identity_pool_id,
            identity_id=identity_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
            region_name=region_name,
        )
        storage = _create_facade(bucket, region_name, endpoint_url, provider)

        options: dict = {"level": level}
        if expires:
            options["expires"] = expires
        url = asyncio.run(storage.get(key, options))
        typer.echo(url)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("put")
def put_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    file: Annotated[
        Path,
        typer.Argument(
            help="Local file to upload", exists=True, dir_okay=False, readable=True
        ),
    ],
    bucket: BucketOption,
    level: LevelOption = "public",
    content_type: Annotated[
        Optional[str],
        typer.Option("--content-type", help="MIME type of the uploaded object"),
    ] = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointOption = None,
    identity_pool_id: IdentityPoolOption = None,
    identity_id: IdentityIdOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Upload a local file to an object.
    """
    try:
        provider = _create_credential_provider(
            identity_pool_id=identity_pool_id,
            identity_id=identity_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
            region_name=region_name,
        )
        storage = _create_facade(bucket, region_name, endpoint_url, provider)

        options: dict = {"level": level}
        if content_type:
            options["content_type"] = content_type
        asyncio.run(storage.put(key, file.read_bytes(), options))
        typer.echo(f"Uploaded {file} to {key} ({level})")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("remove")
def remove_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    bucket: BucketOption,
    level: LevelOption = "public",
    region_name: RegionOption = None,
    endpoint_url: EndpointOption = None,
    identity_pool_id: IdentityPoolOption = None,
    identity_id: IdentityIdOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Delete an object.
    """
    try:
        provider = _create_credential_provider(
            identity_pool_id=identity_pool_id,
            identity_id=identity_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
            region_name=region_name,
        )
        storage = _create_facade(bucket, region_name, endpoint_url, provider)

        asyncio.run(storage.remove(key, {"level": level}))
        typer.echo(f"Removed {key} ({level})")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("list")
def list_cmd(
    bucket: BucketOption,
    path: Annotated[str, typer.Argument(help="Path to list under")] = "",
    level: LevelOption = "public",
    region_name: RegionOption = None,
    endpoint_url: EndpointOption = None,
    identity_pool_id: IdentityPoolOption = None,
    identity_id: IdentityIdOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    List objects under a path.

    Example:
        user-storage list photos/ --bucket user-files --identity-id me \
            --aws-profile myprofile
    """
    try:
        provider = _create_credential_provider(
            identity_pool_id=identity_pool_id,
            identity_id=identity_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
            region_name=region_name,
        )
        storage = _create_facade(bucket, region_name, endpoint_url, provider)

        items = asyncio.run(storage.list(path, {"level": level}))

        if items:
            typer.echo(f"Found {len(items)} objects:")
            for item in items:
                typer.echo(f"  {item.key}\t{item.size:,} bytes")
        else:
            typer.echo("No objects found.")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
