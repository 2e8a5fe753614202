"""Factory classes for creating toolchain queries."""

from .core.toolchain import GoToolchain, NodeToolchain, NativePlatform


class ToolchainFactory:
    """Factory for creating toolchain platform queries."""

    TOOLCHAINS = {
        "go": GoToolchain,
        "node": NodeToolchain,
        "native": NativePlatform,
    }

    @staticmethod
    def create_toolchain(toolchain_type):
        """Create a toolchain query based on the specified type.

        Args:
            toolchain_type (str): Type of toolchain to create.

        Returns:
            Toolchain: An instance of the specified toolchain.

        Raises:
            ValueError: If the toolchain type is not supported.
        """
        toolchains = ToolchainFactory.TOOLCHAINS

        if not toolchain_type or toolchain_type.lower() not in toolchains:
            supported = ", ".join(sorted(toolchains))
            raise ValueError(f"Unsupported toolchain: {toolchain_type}. Supported: {supported}")

        return toolchains[toolchain_type.lower()]()
