"""
Device code sign-in for Microsoft Graph, with the MSAL token cache kept in
one configured store.
"""

from __future__ import annotations

import logging
from pathlib import Path

import keyring
import msal
from keyring.errors import KeyringError, PasswordDeleteError
from rich.console import Console

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

console = Console()

KEYRING_SERVICE_NAME = "meetingfinder"
DEFAULT_CACHE_FILE = Path.home() / ".meetingfinder" / "token_cache.json"
TOKEN_CACHES = ("keyring", "file")


class GraphAuthenticator:
    """
    Signs in to Microsoft Graph and hands out access tokens.

    ``token_cache`` picks where MSAL's serialized cache is kept:
    ``"keyring"`` stores it in the system keyring under ``client_id:tenant_id``,
    ``"file"`` writes it to ``cache_file`` with owner-only permissions.
    A broken store is an error; the other store is never tried instead.
    """

    # Free/busy data of colleagues needs the shared calendar scope
    SCOPES = ["Calendars.Read.Shared", "Calendars.Read"]

    def __init__(
        self,
        client_id: str,
        tenant_id: str,
        *,
        token_cache: str = "keyring",
        cache_file: Path | None = None,
        authority_url: str | None = None,
    ):
        if not client_id or not tenant_id:
            raise AuthenticationError(
                "client_id and tenant_id must be configured to use Microsoft Graph."
            )
        if token_cache not in TOKEN_CACHES:
            raise AuthenticationError(f"Unknown token cache '{token_cache}'")

        self.token_cache = token_cache
        self.cache_file = cache_file or DEFAULT_CACHE_FILE
        self._cache_key = f"{client_id}:{tenant_id}"

        self._cache = msal.SerializableTokenCache()
        serialized = self._read_cache()
        if serialized:
            try:
                self._cache.deserialize(serialized)
            except ValueError as exc:
                # A corrupt cache only costs a new sign-in
                logger.warning("Ignoring unreadable token cache: %s", exc)

        self.app = msal.PublicClientApplication(
            client_id=client_id,
            authority=authority_url or f"https://login.microsoftonline.com/{tenant_id}",
            token_cache=self._cache,
        )

    def _read_cache(self) -> str | None:
        if self.token_cache == "file":
            if not self.cache_file.exists():
                return None
            try:
                return self.cache_file.read_text(encoding="utf-8")
            except OSError as exc:
                raise AuthenticationError(f"Cannot read token cache {self.cache_file}: {exc}") from exc

        try:
            return keyring.get_password(KEYRING_SERVICE_NAME, self._cache_key)
        except KeyringError as exc:
            raise AuthenticationError(
                f"System keyring unavailable ({exc}). Set 'token_cache: file' in the config."
            ) from exc

    def _write_cache(self) -> None:
        if not self._cache.has_state_changed:
            return

        serialized = self._cache.serialize()
        if self.token_cache == "file":
            try:
                self.cache_file.parent.mkdir(parents=True, exist_ok=True)
                self.cache_file.write_text(serialized, encoding="utf-8")
                self.cache_file.chmod(0o600)
            except OSError as exc:
                raise AuthenticationError(f"Cannot write token cache {self.cache_file}: {exc}") from exc
        else:
            try:
                keyring.set_password(KEYRING_SERVICE_NAME, self._cache_key, serialized)
            except KeyringError as exc:
                raise AuthenticationError(f"Cannot store token in system keyring: {exc}") from exc

        self._cache.has_state_changed = False
        logger.debug("Token cache saved to %s", self.token_cache)

    def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Return an access token, signing in only when the cache has none.

        Raises:
            AuthenticationError: If sign-in fails or the token store is unusable
        """
        if not force_refresh:
            accounts = self.app.get_accounts()
            if accounts:
                result = self.app.acquire_token_silent(scopes=self.SCOPES, account=accounts[0])
                if result and "access_token" in result:
                    self._write_cache()
                    return result["access_token"]
                logger.debug("No cached token for %s", accounts[0].get("username"))

        return self._sign_in()

    def _sign_in(self) -> str:
        flow = self.app.initiate_device_flow(scopes=self.SCOPES)
        if "user_code" not in flow:
            raise AuthenticationError(
                f"Failed to initiate device flow: {flow.get('error_description', 'Unknown error')}"
            )

        console.print("\n[bold cyan]🔐 Microsoft-Anmeldung erforderlich[/bold cyan]")
        console.print(
            f"Im Browser [bold cyan]{flow['verification_uri']}[/bold cyan] öffnen "
            f"und den Code [bold yellow]{flow['user_code']}[/bold yellow] eingeben.\n"
        )
        console.print("[dim]Warte auf Anmeldung...[/dim]\n")

        result = self.app.acquire_token_by_device_flow(flow)
        if "access_token" not in result:
            raise AuthenticationError(
                f"Authentication failed: {result.get('error_description', 'Unknown error')}"
            )

        self._write_cache()
        return result["access_token"]

    def clear_cache(self) -> None:
        """Forget stored tokens so the next call signs in again."""
        if self.token_cache == "file":
            self.cache_file.unlink(missing_ok=True)
        else:
            try:
                keyring.delete_password(KEYRING_SERVICE_NAME, self._cache_key)
            except PasswordDeleteError:
                logger.debug("No token stored in keyring for %s", self._cache_key)
            except KeyringError as exc:
                raise AuthenticationError(f"Cannot remove token from system keyring: {exc}") from exc

        self._cache = msal.SerializableTokenCache()
