"""
Release descriptor and download URL templating.

A release descriptor pins which binary to provision and where its archives
live. URL templates use three placeholders that are substituted literally:

    https://example.com/v{{version}}/tool_{{version}}_{{platform}}_{{arch}}.tar.gz
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from binwrapper.core.exceptions import ConfigurationError
from binwrapper.core.platform import DEFAULT_PLATFORM_MAPPING, HostTarget

logger = logging.getLogger(__name__)

VERSION_PLACEHOLDER = "{{version}}"
PLATFORM_PLACEHOLDER = "{{platform}}"
ARCH_PLACEHOLDER = "{{arch}}"

REQUIRED_PLACEHOLDERS = (VERSION_PLACEHOLDER, PLATFORM_PLACEHOLDER, ARCH_PLACEHOLDER)


def validate_template(template: str) -> None:
    """
    Check that a URL template carries every required placeholder.

    Raises:
        ConfigurationError: If the template is empty or a placeholder is missing
    """
    if not template:
        raise ConfigurationError("URL template cannot be empty")

    missing = [p for p in REQUIRED_PLACEHOLDERS if p not in template]
    if missing:
        raise ConfigurationError(
            f"URL template '{template}' is missing placeholder(s): {', '.join(missing)}"
        )


def build_url(template: str, version: str, os: str, arch: str) -> str:
    """
    Expand a URL template.

    Every occurrence of each placeholder is replaced; all other text is left
    untouched.

    Args:
        template: URL template with {{version}}, {{platform}} and {{arch}}
        version: Release version
        os: Canonical OS token
        arch: Canonical architecture token

    Returns:
        Expanded URL

    Raises:
        ConfigurationError: If the template is malformed

    Example:
        >>> build_url("https://h/p_{{version}}_{{platform}}_{{arch}}.tar.gz",
        ...           "1.2.3", "linux", "amd64")
        'https://h/p_1.2.3_linux_amd64.tar.gz'
    """
    validate_template(template)

    return (
        template.replace(VERSION_PLACEHOLDER, version)
        .replace(PLATFORM_PLACEHOLDER, os)
        .replace(ARCH_PLACEHOLDER, arch)
    )


@dataclass(frozen=True)
class ReleaseDescriptor:
    """
    Immutable description of the release to provision.

    Attributes:
        name: Binary base name, without any platform extension
        version: Pinned release version
        url_template: Download URL template
        platform_mapping: Raw OS -> artifact OS token table
        platform_url_templates: Per-OS template overrides, keyed by the
            canonical OS token (e.g. a .zip template for 'windows')
    """

    name: str
    version: str
    url_template: str
    platform_mapping: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_PLATFORM_MAPPING)
    )
    platform_url_templates: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Release descriptor requires a binary name")
        if not self.version:
            raise ConfigurationError("Release descriptor requires a version")

        validate_template(self.url_template)
        for os_name, template in self.platform_url_templates.items():
            try:
                validate_template(template)
            except ConfigurationError as e:
                raise ConfigurationError(
                    f"Invalid URL template override for '{os_name}': {e}"
                ) from e

    def template_for(self, os: str) -> str:
        """Get the URL template used for a canonical OS token."""
        return self.platform_url_templates.get(os, self.url_template)

    def url_for(self, host: HostTarget) -> str:
        """
        Build the download URL for a host.

        Example:
            >>> descriptor.url_for(HostTarget("linux", "x64", "linux", "amd64"))
            'https://example/pkg_1.2.3_linux_amd64.tar.gz'
        """
        url = build_url(self.template_for(host.os), self.version, host.os, host.arch)
        logger.debug(f"Resolved release URL for {host}: {url}")
        return url

    def with_version(self, version: Optional[str]) -> "ReleaseDescriptor":
        """Return a copy pinned to another version (unchanged if None)."""
        if not version or version == self.version:
            return self

        return ReleaseDescriptor(
            name=self.name,
            version=version,
            url_template=self.url_template,
            platform_mapping=dict(self.platform_mapping),
            platform_url_templates=dict(self.platform_url_templates),
        )
