"""
Template helper functions.

Every helper is a TemplateFunction member carrying its implementation,
signature, description and whether it touches the host (unsafe). Unsafe
helpers (commands, environment, files, network, interactive input) are only
installed when explicitly enabled.

Usage:
    functions = build_function_map(unsafe=False)
    functions["b64enc"]("hello")  # "aGVsbG8="
"""

from __future__ import annotations

import base64
import binascii
import functools
import getpass
import gzip as gzip_lib
import json
import os
import secrets
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

import httpx
import yaml
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from msgkit.logger.core import Logger
from msgkit.logger.errors import TemplateFunctionError

if TYPE_CHECKING:
    from msgkit.templates.usage import UsageTracker

NONCE_SIZE = 12


def _as_bytes(value: Any) -> bytes:
    """Accept str, bytes or a readable object."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if hasattr(value, "read"):
        data = value.read()
        return data.encode("utf-8") if isinstance(data, str) else bytes(data)
    raise TemplateFunctionError(
        f"invalid argument {type(value).__name__}, supported types: str, bytes or a readable object"
    )


# ── Collections ───────────────────────────────────────────────────────

def add(collection: Any, value: Any, key: Any = None) -> Any:
    """Add value to a list, or under key to a dict. Returns the collection."""
    if isinstance(collection, dict):
        if key is None:
            raise TemplateFunctionError("must provide a key for value to be added")
        collection[key] = value
        return collection
    if isinstance(collection, list):
        collection.append(value)
        return collection
    raise TemplateFunctionError(
        f"invalid argument {type(collection).__name__}, supported types: lists and dicts"
    )


# ── Encodings ─────────────────────────────────────────────────────────

def b64enc(value: Any) -> str:
    return base64.b64encode(_as_bytes(value)).decode("ascii")


def b64dec(value: Any) -> bytes:
    try:
        return base64.b64decode(_as_bytes(value), validate=True)
    except binascii.Error as exc:
        raise TemplateFunctionError(f"b64dec: {exc}") from exc


def hexenc(value: Any) -> str:
    return _as_bytes(value).hex()


def hexdec(value: Any) -> bytes:
    try:
        return bytes.fromhex(_as_bytes(value).decode("ascii"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise TemplateFunctionError(f"hexdec: {exc}") from exc


def tojson(value: Any) -> str:
    return json.dumps(value, default=str)


def fromjson(value: Any) -> Any:
    try:
        return json.loads(_as_bytes(value))
    except ValueError as exc:
        raise TemplateFunctionError(f"fromjson: {exc}") from exc


def toyaml(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=False, allow_unicode=True)


def fromyaml(value: Any) -> Any:
    try:
        return yaml.safe_load(_as_bytes(value))
    except yaml.YAMLError as exc:
        raise TemplateFunctionError(f"fromyaml: {exc}") from exc


def stringify(value: Any) -> str:
    """str, int, bool or bytes to text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    raise TemplateFunctionError(
        f"invalid argument {type(value).__name__}, supported types: int, bool and bytes"
    )


# ── Compression ───────────────────────────────────────────────────────

def gzip(value: Any) -> bytes:
    return gzip_lib.compress(_as_bytes(value), compresslevel=9)


def gunzip(value: Any) -> bytes:
    """Decompress. Strings are assumed to be base64-encoded archives."""
    data = b64dec(value) if isinstance(value, str) else _as_bytes(value)
    try:
        return gzip_lib.decompress(data)
    except (OSError, EOFError) as exc:
        raise TemplateFunctionError(f"gunzip: {exc}") from exc


# ── Crypto ────────────────────────────────────────────────────────────

def _aead(b64key: str) -> AESGCM:
    try:
        return AESGCM(base64.b64decode(b64key, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise TemplateFunctionError(f"invalid key: {exc}") from exc


def encrypt(value: Any, b64key: str, aad: str = "") -> bytes:
    """AES-GCM seal. Output layout: ciphertext || tag || nonce."""
    aead = _aead(b64key)
    nonce = secrets.token_bytes(NONCE_SIZE)
    return aead.encrypt(nonce, _as_bytes(value), aad.encode("utf-8")) + nonce


def decrypt(value: Any, b64key: str, aad: str = "") -> bytes:
    """AES-GCM open of encrypt() output. Strings are assumed base64-encoded."""
    data = b64dec(value) if isinstance(value, str) else _as_bytes(value)
    if len(data) < NONCE_SIZE:
        raise TemplateFunctionError("decrypt: ciphertext too short")
    aead = _aead(b64key)
    try:
        return aead.decrypt(data[-NONCE_SIZE:], data[:-NONCE_SIZE], aad.encode("utf-8"))
    except InvalidTag as exc:
        raise TemplateFunctionError("decrypt: authentication failed") from exc


def random(size: int) -> bytes:
    return secrets.token_bytes(size)


# ── Strings and paths ─────────────────────────────────────────────────

def join(items: Any, sep: str = "") -> str:
    return sep.join(str(i) for i in items)


def split(value: str, sep: str) -> list[str]:
    return value.split(sep)


def lower(value: str) -> str:
    return value.lower()


def upper(value: str) -> str:
    return value.upper()


def trimprefix(value: str, prefix: str) -> str:
    return value.removeprefix(prefix)


def trimsuffix(value: str, suffix: str) -> str:
    return value.removesuffix(suffix)


def pathbase(path: str) -> str:
    if not path:
        return "."
    return os.path.basename(path.rstrip("/")) or "/"


def pathext(path: str) -> str:
    return os.path.splitext(path)[1]


# ── Host access (unsafe) ──────────────────────────────────────────────

def cmd(prog: str, *args: str) -> str:
    """Run a command; anything on stderr counts as failure."""
    try:
        result = subprocess.run(
            [prog, *args], capture_output=True, text=True, check=False
        )
    except OSError as exc:
        raise TemplateFunctionError(f"{prog}: {exc}") from exc
    if result.returncode != 0:
        raise TemplateFunctionError(
            f"{prog} exited with status {result.returncode}: {result.stderr.strip()}"
        )
    if result.stderr:
        raise TemplateFunctionError(f"{prog} error: {result.stderr}")
    return result.stdout


def env(name: str, default: str = "") -> str:
    return os.environ.get(name, default)


def http(
    method: str,
    url: str,
    body: Any = None,
    headers: Optional[dict[str, str]] = None,
) -> httpx.Response:
    """HEAD|GET|POST ... url with an optional raw body and headers."""
    content = None if body is None else _as_bytes(body)
    return httpx.request(method.upper(), url, content=content, headers=headers)


def rawfile(path: str) -> bytes:
    return Path(path).read_bytes()


def textfile(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def writefile(value: Any, path: str) -> str:
    """Append data to a file (created 0600). Renders as nothing."""
    data = _as_bytes(value)
    fd = os.open(path, os.O_APPEND | os.O_CREAT | os.O_WRONLY, 0o600)
    with os.fdopen(fd, "ab") as f:
        f.write(data)
    return ""


def userinput(title: str, hidden: bool = False) -> str:
    """Read interactive input; hidden input is read without echo."""
    log = Logger.default()
    if hidden:
        log.noticef("(%s) input secret now, followed by newline", title)
        return getpass.getpass("")
    log.noticef("(%s) reading input, CTRL-D to stop", title)
    return sys.stdin.read().strip()


# ── Catalog ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FunctionSpec:
    impl: Callable[..., Any]
    signature: str
    description: str
    unsafe: bool = False


class TemplateFunction(Enum):
    ADD = FunctionSpec(
        add, "add(collection, value, key=None) -> collection",
        "add value to a list, or under key to a dict",
    )
    B64DEC = FunctionSpec(b64dec, "b64dec(data) -> bytes", "base64 decode")
    B64ENC = FunctionSpec(b64enc, "b64enc(data) -> str", "base64 encode")
    CMD = FunctionSpec(
        cmd, "cmd(prog, *args) -> str", "execute a command on local host", unsafe=True,
    )
    DECRYPT = FunctionSpec(
        decrypt, "decrypt(data, b64key, aad='') -> bytes",
        "decrypt data with AES-GCM: ciphertext, base64 key, additional data",
    )
    ENCRYPT = FunctionSpec(
        encrypt, "encrypt(data, b64key, aad='') -> bytes",
        "encrypt data with AES-GCM: plaintext, base64 key, additional data",
    )
    ENV = FunctionSpec(
        env, "env(name, default='') -> str",
        "get an environment variable, optionally with a default", unsafe=True,
    )
    FROMJSON = FunctionSpec(fromjson, "fromjson(data) -> any", "json decode")
    FROMYAML = FunctionSpec(fromyaml, "fromyaml(data) -> any", "yaml decode")
    GUNZIP = FunctionSpec(gunzip, "gunzip(data) -> bytes", "extract GZIP compressed data")
    GZIP = FunctionSpec(gzip, "gzip(data) -> bytes", "compress with GZIP")
    HEXDEC = FunctionSpec(hexdec, "hexdec(data) -> bytes", "hex decode")
    HEXENC = FunctionSpec(hexenc, "hexenc(data) -> str", "hex encode")
    HTTP = FunctionSpec(
        http, "http(method, url, body=None, headers=None) -> response",
        "HEAD|GET|POST, url, body(raw), headers", unsafe=True,
    )
    JOIN = FunctionSpec(join, "join(items, sep='') -> str", "join items with a separator")
    LOWER = FunctionSpec(lower, "lower(s) -> str", "lowercase")
    PATHBASE = FunctionSpec(pathbase, "pathbase(path) -> str", "last element of a path")
    PATHEXT = FunctionSpec(pathext, "pathext(path) -> str", "file name extension of a path")
    RANDOM = FunctionSpec(
        random, "random(size) -> bytes", "generate size random bytes from a CSPRNG",
    )
    RAWFILE = FunctionSpec(
        rawfile, "rawfile(path) -> bytes", "read raw bytes from a file", unsafe=True,
    )
    SPLIT = FunctionSpec(split, "split(s, sep) -> list", "split a string on a separator")
    STRING = FunctionSpec(
        stringify, "string(value) -> str", "convert int/bool to string, bytes to text",
    )
    TEXTFILE = FunctionSpec(
        textfile, "textfile(path) -> str", "read a file as a string", unsafe=True,
    )
    TOJSON = FunctionSpec(tojson, "tojson(value) -> str", "json encode")
    TOYAML = FunctionSpec(toyaml, "toyaml(value) -> str", "yaml encode")
    TRIMPREFIX = FunctionSpec(trimprefix, "trimprefix(s, prefix) -> str", "remove a leading prefix")
    TRIMSUFFIX = FunctionSpec(trimsuffix, "trimsuffix(s, suffix) -> str", "remove a trailing suffix")
    UPPER = FunctionSpec(upper, "upper(s) -> str", "uppercase")
    USERINPUT = FunctionSpec(
        userinput, "userinput(title, hidden=False) -> str",
        "get interactive user input (needs a terminal); hidden input is not echoed",
        unsafe=True,
    )
    WRITEFILE = FunctionSpec(
        writefile, "writefile(data, path) -> ''",
        "store data to a file (append if it already exists)", unsafe=True,
    )

    @property
    def function_name(self) -> str:
        return self.name.lower()

    @property
    def spec(self) -> FunctionSpec:
        return self.value


def _tracked(name: str, impl: Callable[..., Any], tracker: "UsageTracker") -> Callable[..., Any]:
    @functools.wraps(impl)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            out = impl(*args, **kwargs)
        except Exception as exc:
            tracker.track(name, None, exc, *args)
            raise
        tracker.track(name, out, None, *args)
        return out
    return wrapper


def build_function_map(
    unsafe: bool = False,
    tracker: Optional["UsageTracker"] = None,
) -> dict[str, Callable[..., Any]]:
    """Name → callable for every enabled helper."""
    functions: dict[str, Callable[..., Any]] = {}
    for fn in TemplateFunction:
        if fn.spec.unsafe and not unsafe:
            continue
        impl = fn.spec.impl
        if tracker is not None:
            impl = _tracked(fn.function_name, impl, tracker)
        functions[fn.function_name] = impl
    return functions


def describe_functions() -> dict[str, dict[str, Any]]:
    """The catalog as a JSON-ready mapping."""
    return {
        fn.function_name: {
            "description": fn.spec.description,
            "function": fn.spec.signature,
            "unsafe": fn.spec.unsafe,
        }
        for fn in TemplateFunction
    }
