#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HABCSF - signed Command Sequence File generator for HAB4 images."""

import logging
import sys
from typing import Optional

import click

from habcsf.apps.utils import habcsf_logger
from habcsf.apps.utils.common_cli_options import (
    habcsf_apps_common_options,
    habcsf_boot_media_option,
    habcsf_output_option,
)
from habcsf.apps.utils.utils import INT, catch_habcsf_error, format_raw_data
from habcsf.crypto.keys import SigningCredentials
from habcsf.hab.boot_header import BootMedia, parse_boot_header
from habcsf.hab.csf_builder import CsfBuilder, PointerMode
from habcsf.hab.csf_image import CsfImage
from habcsf.hab.hab_srk import SrkTableData
from habcsf.utils.misc import load_binary, write_file

logger = logging.getLogger(__name__)

FUSE_WARNING = """
WARNING: Burning the SRK hash into the fuses and closing the device (HAB closed
configuration) is irreversible. Verify that the device boots the signed image
in HAB open configuration without any HAB events before programming the fuses.
"""


@click.group(name="habcsf", no_args_is_help=False)
@habcsf_apps_common_options
def main(log_level: int) -> None:
    """Utility for creating signed CSF (Command Sequence File) for HAB4 images."""
    habcsf_logger.install(level=log_level)


@main.command(name="sign")
@click.option(
    "--csf-key",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the private key of the CSF signing certificate (PEM or DER).",
)
@click.option(
    "--csf-cert",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the CSF signing certificate (PEM or DER).",
)
@click.option(
    "--img-key",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the private key of the image signing certificate (PEM or DER).",
)
@click.option(
    "--img-cert",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the image signing certificate (PEM or DER).",
)
@click.option(
    "--srk-table",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the binary SRK table.",
)
@click.option(
    "--srk-index",
    type=click.IntRange(1, 4),
    required=True,
    help="Index of the SRK in the SRK table, starting from 1.",
)
@click.option(
    "--image",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the image to be signed, starting with the boot vector table.",
)
@habcsf_output_option
@click.option(
    "--debug-info",
    is_flag=True,
    default=False,
    help="Print the parsed boot header and the required CSF length.",
)
@click.option("--csf-key-password", help="Password of the encrypted CSF private key.")
@click.option("--img-key-password", help="Password of the encrypted image private key.")
@habcsf_boot_media_option
@click.option(
    "--absolute-pointers",
    is_flag=True,
    default=False,
    help="Store absolute addresses (CSF address added) into the command data pointers.",
)
def sign(
    csf_key: str,
    csf_cert: str,
    img_key: str,
    img_cert: str,
    srk_table: str,
    srk_index: int,
    image: str,
    output: str,
    debug_info: bool,
    csf_key_password: Optional[str],
    img_key_password: Optional[str],
    boot_media: str,
    absolute_pointers: bool,
) -> None:
    """Create signed CSF for the image.

    The CSF installs the selected SRK, authenticates itself with the CSF key
    and authenticates the whole image with the image key. Its length equals
    the space the boot header of the image reserves for it.
    """
    image_data = load_binary(image)
    boot_header = parse_boot_header(image_data, BootMedia.from_label(boot_media))
    if debug_info:
        click.echo(str(boot_header))

    builder = CsfBuilder(
        csf_credentials=SigningCredentials.load(csf_cert, csf_key, csf_key_password),
        img_credentials=SigningCredentials.load(img_cert, img_key, img_key_password),
        srk_table=load_binary(srk_table),
        srk_index=srk_index,
        pointer_mode=PointerMode.ABSOLUTE if absolute_pointers else PointerMode.CSF_RELATIVE,
    )
    csf_data = builder.build(image_data, boot_header)
    write_file(csf_data, output, mode="wb")
    click.echo(FUSE_WARNING)
    click.echo(f"Success. (CSF: {output} created.)")


def _load_csf(csf: str, image_data: Optional[bytes], base_address: Optional[int]) -> CsfImage:
    if base_address is None and image_data is not None:
        base_address = parse_boot_header(image_data).csf_address
    return CsfImage.parse(load_binary(csf), base_address)


@main.command(name="parse")
@click.option(
    "-b",
    "--binary",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the CSF binary.",
)
@click.option(
    "--image",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the signed image; its boot header gives the CSF address.",
)
@click.option(
    "--base-address",
    type=INT(),
    help="Load address of the CSF, needed for CSF with absolute pointers.",
)
@click.option("--hexdump", "use_hexdump", is_flag=True, help="Print hexdump of the SRK table.")
def parse(binary: str, image: Optional[str], base_address: Optional[int], use_hexdump: bool) -> None:
    """Print the structure of the CSF binary."""
    csf = _load_csf(binary, load_binary(image) if image else None, base_address)
    click.echo(str(csf))
    for _, record in csf.cmd_data:
        if isinstance(record, SrkTableData):
            click.echo("SRK table data:")
            click.echo(format_raw_data(record.data, use_hexdump=use_hexdump))


@main.command(name="verify")
@click.option(
    "-b",
    "--binary",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the CSF binary.",
)
@click.option(
    "--image",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the signed image; needed to verify the image signature.",
)
@click.option(
    "--base-address",
    type=INT(),
    help="Load address of the CSF, needed for CSF with absolute pointers.",
)
def verify(binary: str, image: Optional[str], base_address: Optional[int]) -> None:
    """Verify signatures of the CSF binary using the certificates it contains."""
    image_data = load_binary(image) if image else None
    csf = _load_csf(binary, image_data, base_address)
    count = csf.verify_signatures(image_data)
    click.echo(f"Verified {count} signature(s).")
    if not image:
        click.echo("Image signature not verified, use --image to verify it.")


@catch_habcsf_error
def safe_main() -> None:
    """Call the main function; usage errors print usage and exit with code 1."""
    try:
        retval = main(standalone_mode=False)  # pylint: disable=no-value-for-parameter
    except click.UsageError as exc:
        if exc.ctx is not None:
            click.echo(exc.ctx.get_usage())
        click.echo(f"Error: {exc.format_message()}")
        sys.exit(1)
    except click.ClickException as exc:
        exc.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(retval if isinstance(retval, int) else 0)


if __name__ == "__main__":
    safe_main()
