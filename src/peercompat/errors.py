"""Custom exceptions for peercompat with user-friendly error messages."""


class PeerCompatError(Exception):
    """Base exception with user-friendly message and optional hint.

    Attributes:
        message: The main error message.
        hint: Optional hint for resolving the error.
    """

    def __init__(self, message: str, hint: str = "") -> None:
        """Initialize the exception.

        Args:
            message: The main error message.
            hint: Optional hint for resolving the error.
        """
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation."""
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class RegistryLookupError(PeerCompatError):
    """A registry query failed.

    Fatal for the package being checked, never for the whole run.
    """

    def __init__(self, package: str, message: str = "", hint: str = "") -> None:
        self.package = package
        if not message:
            message = f"Registry lookup failed for '{package}'"
        super().__init__(message, hint)


class PackageNotFoundError(RegistryLookupError):
    """Package (or package version) does not exist in the registry."""

    def __init__(
        self,
        package: str,
        version: str | None = None,
        message: str = "",
        hint: str = "",
    ) -> None:
        self.version = version
        if not message:
            if version:
                message = f"Version {version} of '{package}' not found in registry"
            else:
                message = f"Package '{package}' not found in registry"
        if not hint:
            hint = "Check the package name in package.json and the configured registry URL."
        super().__init__(package, message, hint)


class RegistryNetworkError(RegistryLookupError):
    """Network connectivity issue while talking to the registry."""

    def __init__(
        self,
        package: str,
        original_error: Exception | None = None,
        message: str = "",
        hint: str = "",
    ) -> None:
        self.original_error = original_error
        if not message:
            message = f"Failed to reach registry for '{package}'"
            if original_error:
                message += f": {original_error}"
        if not hint:
            hint = "Check your internet connection, proxy and registry settings."
        super().__init__(package, message, hint)


class RegistryTimeoutError(RegistryNetworkError):
    """A registry call did not finish before its deadline."""

    def __init__(self, package: str, deadline: float, message: str = "", hint: str = "") -> None:
        self.deadline = deadline
        if not message:
            message = f"Registry call for '{package}' exceeded deadline of {deadline:.1f}s"
        if not hint:
            hint = "Raise registry.request_deadline or lower --jobs."
        super().__init__(package, None, message, hint)


class MalformedResponseError(RegistryLookupError):
    """Registry answered with something that is not a usable document."""

    def __init__(self, package: str, detail: str = "", message: str = "", hint: str = "") -> None:
        if not message:
            message = f"Malformed registry response for '{package}'"
            if detail:
                message += f": {detail}"
        super().__init__(package, message, hint)


class ManifestError(PeerCompatError):
    """The project manifest could not be read or parsed."""

    def __init__(self, path: str, message: str = "", hint: str = "") -> None:
        self.path = path
        if not message:
            message = f"Failed to read manifest {path}"
        if not hint:
            hint = "Run peercompat from the project root or pass the path to package.json."
        super().__init__(message, hint)


class ConfigurationError(PeerCompatError):
    """Invalid configuration."""

    pass
