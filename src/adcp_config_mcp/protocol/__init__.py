"""Protocol layer: command mnemonics, command builders and response decoders."""

from .commands import Mnemonic, build_command
