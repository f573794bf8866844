"""
Credential storage and per-domain resolution.

Durable records live in a line-oriented text file::

    # comment
    domain|username|password|description

Lookup is an exact, case-sensitive match on the first field.  Resolution for
a run goes: run cache → (saved mode) durable store → interactive prompt.
Prompting is an injectable callable so the policy can run without a
terminal.
"""

import enum
import getpass
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from multifile_downloader.config import CREDENTIALS_HEADER, CREDENTIALS_SEPARATOR
from multifile_downloader.errors import ConfigurationError, ValidationError
from multifile_downloader.utils.log import log

# domain -> (username, password)
CredentialPrompt = Callable[[str], tuple[str, str]]
# question -> yes / no
ConfirmPrompt = Callable[[str], bool]


class AuthMode(enum.Enum):
    NONE = "none"
    MANUAL = "manual"      # always prompt, optionally persist
    SAVED = "saved"        # durable store first, prompt as fallback


@dataclass(frozen=True)
class CredentialRecord:
    domain: str
    username: str
    password: str
    description: str = ""

    def to_line(self) -> str:
        return CREDENTIALS_SEPARATOR.join(
            (self.domain, self.username, self.password, self.description)
        )

    @classmethod
    def from_line(cls, line: str) -> "CredentialRecord | None":
        """Parse one file line; comments and blank lines give ``None``."""
        line = line.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            return None
        fields = line.split(CREDENTIALS_SEPARATOR, 3)
        fields += [""] * (4 - len(fields))
        return cls(*fields)


def validate_credentials(username: str, password: str) -> None:
    if not username or not password:
        raise ValidationError("Username and password cannot be empty")


class CredentialStore:
    """The durable per-domain credential file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def check_readable(self) -> None:
        """Raise ``ConfigurationError`` when the file exists but cannot be read."""
        if self.path.exists() and not os.access(self.path, os.R_OK):
            raise ConfigurationError(f"Credentials file is not readable: {self.path}")

    def _read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        try:
            return self.path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise ConfigurationError(
                f"Cannot read credentials file {self.path}: {exc}"
            ) from exc

    def records(self) -> list[CredentialRecord]:
        return [
            rec for rec in map(CredentialRecord.from_line, self._read_lines())
            if rec is not None
        ]

    def get(self, domain: str) -> CredentialRecord | None:
        """First complete record whose domain equals *domain* exactly."""
        for rec in self.records():
            if rec.domain == domain:
                if rec.username and rec.password:
                    return rec
                return None
        return None

    def lookup(self, domain: str) -> tuple[str, str] | None:
        rec = self.get(domain)
        return (rec.username, rec.password) if rec else None

    def ensure_exists(self) -> None:
        """Create the file with its comment header if it is missing."""
        if self.path.exists():
            return
        self._write_lines(CREDENTIALS_HEADER.splitlines())
        log.info("Created credentials file: %s", self.path)

    def save(
        self,
        domain: str,
        username: str,
        password: str,
        description: str = "",
    ) -> CredentialRecord:
        """
        Persist credentials for *domain*, replacing any existing record for
        it (last write wins, no field merge).  The file is rewritten
        atomically.
        """
        if not domain:
            raise ValidationError("Domain cannot be empty")
        validate_credentials(username, password)
        for value in (domain, username, password):
            if CREDENTIALS_SEPARATOR in value or "\n" in value:
                raise ValidationError(
                    f"Credential fields cannot contain '{CREDENTIALS_SEPARATOR}' or newlines"
                )
        record = CredentialRecord(
            domain, username, password,
            description.replace("\n", " ") or f"Account for {domain}",
        )

        lines = self._read_lines() or CREDENTIALS_HEADER.splitlines()
        kept = []
        replaced = False
        for line in lines:
            rec = CredentialRecord.from_line(line)
            if rec is not None and rec.domain == domain:
                replaced = True
                continue
            kept.append(line)
        kept.append(record.to_line())
        self._write_lines(kept)

        if replaced:
            log.info("Updated existing credentials for %s", domain)
        else:
            log.info("Credentials saved for domain: %s", domain)
        return record

    def _write_lines(self, lines: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".creds-", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write("\n".join(lines) + "\n")
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def terminal_prompt(domain: str) -> tuple[str, str]:
    """Ask for credentials on the terminal (password input hidden)."""
    username = input(f"Username for {domain}: ").strip()
    password = getpass.getpass(f"Password for {domain}: ")
    return username, password


def terminal_confirm(question: str) -> bool:
    while True:
        answer = input(f"{question} (y/n): ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False


class CredentialResolver:
    """
    Resolve ``domain -> (username, password)`` for one run.

    *cache* is the run-scoped dictionary (normally ``RunContext.credential_cache``);
    it is filled on every successful resolution and never written to disk.
    Without a *prompt* the resolver is non-interactive and raises
    ``ValidationError`` where it would have asked.
    """

    def __init__(
        self,
        store: CredentialStore,
        mode: AuthMode = AuthMode.SAVED,
        prompt: CredentialPrompt | None = terminal_prompt,
        confirm_save: ConfirmPrompt | None = None,
        cache: dict[str, tuple[str, str]] | None = None,
        max_attempts: int = 3,
    ) -> None:
        self.store = store
        self.mode = mode
        self.prompt = prompt
        self.confirm_save = confirm_save
        self.cache = cache if cache is not None else {}
        self.max_attempts = max_attempts

    def resolve(self, domain: str) -> tuple[str, str]:
        if domain in self.cache:
            log.debug("[AUTH] Using cached credentials for %s", domain)
            return self.cache[domain]

        if self.mode is AuthMode.SAVED:
            found = self.store.lookup(domain)
            if found:
                log.info("[AUTH] Found saved credentials for domain: %s", domain)
                self.cache[domain] = found
                return found
            log.warning("[AUTH] No saved credentials found for domain: %s", domain)

        creds = self._ask(domain)
        self.cache[domain] = creds

        if (
            self.mode is AuthMode.MANUAL
            and self.confirm_save is not None
            and self.confirm_save(f"Save credentials for {domain} to {self.store.path}?")
        ):
            self.store.save(domain, *creds)
        return creds

    def _ask(self, domain: str) -> tuple[str, str]:
        if self.prompt is None:
            raise ValidationError(f"No credentials available for {domain}")
        for attempt in range(1, self.max_attempts + 1):
            username, password = self.prompt(domain)
            try:
                validate_credentials(username, password)
            except ValidationError as exc:
                log.warning("%s (attempt %d/%d)", exc, attempt, self.max_attempts)
                continue
            return username, password
        raise ValidationError(f"No valid credentials entered for {domain}")
