"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, no string-key
dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, locale="zh")
    """

    # Expose exception text in 500 bodies
    debug: bool = False

    # Fallback message locale when Accept-Language matches no catalog
    locale: str = "en"

    # Client stub bundle. client_table applies to the served bundle only;
    # EndpointInfo.client_script always targets the default table.
    client_script_path: str = "/api/__client__.js"
    client_table: str = "__api__"
