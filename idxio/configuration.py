import os
import tomllib
from dataclasses import dataclass


@dataclass
class DecodeConfiguration:
    """Options controlling how strictly IDX headers are checked."""

    strict_reserved: bool = False  # Reject files whose two leading bytes are not zero
    allow_negative_dimensions: bool = False  # Reinterpret negative sizes as unsigned 32-bit

    @classmethod
    def load(cls, config_path: str) -> "DecodeConfiguration":
        """
        Load decode configuration from a TOML file.

        Parameters
        ----------
        config_path : str
            Filesystem path to a TOML file containing a "decode" table.

        Returns
        -------
        DecodeConfiguration
            Instance populated from the "decode" table; fields not present
            use their dataclass defaults.

        Raises
        ------
        FileNotFoundError
            If no file exists at `config_path`.
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found at {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        decode_data = data.get("decode", {})
        return cls(**decode_data)
