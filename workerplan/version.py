"""
Version module - Parses Kubernetes versions used for worker pool hashing
"""
from .errors import ConfigurationError


class Version:
    """Represents a Kubernetes version"""

    def __init__(self, version_string: str):
        """
        Parse a Kubernetes version string
        Accepts: "1.27.4", "v1.27.4", "1.27"
        """
        if not isinstance(version_string, str):
            raise ConfigurationError(f"Invalid version format: {version_string!r}")

        stripped = version_string.strip()
        if stripped.startswith('v'):
            stripped = stripped[1:]

        # Drop pre-release and build metadata (1.27.4-gke.100, 1.27.4+k3s1)
        core = stripped.split('-', 1)[0].split('+', 1)[0]
        parts = core.split('.')

        if len(parts) < 2 or len(parts) > 3:
            raise ConfigurationError(f"Invalid version format: {version_string}")

        try:
            numbers = [int(p) for p in parts]
        except ValueError:
            raise ConfigurationError(f"Invalid version format: {version_string}") from None

        if any(n < 0 for n in numbers):
            raise ConfigurationError(f"Invalid version format: {version_string}")

        self.major = numbers[0]
        self.minor = numbers[1]
        self.patch = numbers[2] if len(numbers) > 2 else 0

    def __str__(self):
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self):
        return f"Version({self})"

    def __eq__(self, other):
        return (self.major, self.minor, self.patch) == (other.major, other.minor, other.patch)

    def __lt__(self, other):
        return (self.major, self.minor, self.patch) < (other.major, other.minor, other.patch)

    def __le__(self, other):
        return self < other or self == other

    def __hash__(self):
        return hash((self.major, self.minor, self.patch))

    def major_minor(self) -> str:
        """Return minor version string (e.g., '1.27')"""
        return f"{self.major}.{self.minor}"


def major_minor(version_string: str) -> str:
    """Shortcut for Version(version_string).major_minor()"""
    return Version(version_string).major_minor()
