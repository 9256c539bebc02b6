"""TXT lookup gateway: resolver fallback, TTL cache, rate limiting, record selection."""

import logging
import re
import threading
import time
from datetime import datetime, timedelta
from typing import Optional, Union

import dns.exception
import dns.rdatatype
import dns.resolver

from .config import Settings
from .exceptions import (
    DnsAllResolversExhaustedError,
    DnsNxdomainError,
    DnsServfailError,
    DnsTimeoutError,
    InvalidDomainError,
    InvalidSelectorError,
)
from .models import DnsRecord, DnsResponse, DnsStatus, LookupResult, RecordType
from .recommendations import coerce_record_type

logger = logging.getLogger(__name__)


# ── Rate Limiter ───────────────────────────────────────────────────────────────

class RateLimiter:
    """Token bucket shared by every query issued through one fetcher."""

    def __init__(self, rate: float = 50.0):
        self._rate = rate
        self._tokens = rate
        self._last_check = time.monotonic()
        self._lock = threading.Lock()

    def acquire(self) -> None:
        with self._lock:
            now = time.monotonic()
            self._tokens = min(self._rate, self._tokens + (now - self._last_check) * self._rate)
            self._last_check = now
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return
            wait = (1.0 - self._tokens) / self._rate
            self._tokens = 0.0
        logger.debug("rate limited, sleeping %.3fs", wait)
        time.sleep(wait)


# ── TXT Cache ──────────────────────────────────────────────────────────────────

class DnsCache:
    """TTL cache for TXT answers. NXDOMAIN is cached briefly."""

    MAX_ENTRIES = 10_000
    MIN_TTL = 60
    MAX_TTL = 3_600
    NXDOMAIN_TTL = 300

    def __init__(self):
        self._store: dict[str, tuple[DnsResponse, datetime]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(domain: str) -> str:
        return domain.lower().rstrip(".")

    def get(self, domain: str) -> Optional[DnsResponse]:
        key = self._key(domain)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            response, expires_at = entry
            if datetime.utcnow() > expires_at:
                del self._store[key]
                return None
            response.cache_hit = True
            return response

    def put(self, domain: str, response: DnsResponse) -> None:
        expires_at = datetime.utcnow() + timedelta(seconds=self._ttl_for(response))
        with self._lock:
            if len(self._store) >= self.MAX_ENTRIES:
                now = datetime.utcnow()
                for key in [k for k, (_, exp) in self._store.items() if now > exp]:
                    del self._store[key]
            self._store[self._key(domain)] = (response, expires_at)

    def _ttl_for(self, response: DnsResponse) -> int:
        if response.status == DnsStatus.NXDOMAIN or not response.records:
            return self.NXDOMAIN_TTL
        ttl = min(r.ttl for r in response.records)
        return max(self.MIN_TTL, min(self.MAX_TTL, ttl))

    def flush(self) -> None:
        with self._lock:
            self._store.clear()


# ── DNS Fetcher ────────────────────────────────────────────────────────────────

_DOMAIN_PATTERN = re.compile(
    r"^(?:_?[a-zA-Z0-9](?:[a-zA-Z0-9\-_]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,63}$"
)


def normalize_domain(domain: str) -> str:
    domain = (domain or "").lower().strip().rstrip(".")
    if len(domain) > 253:
        raise InvalidDomainError(f"Domain too long: {domain}")
    if not _DOMAIN_PATTERN.match(domain):
        raise InvalidDomainError(f"Invalid domain name: {domain or '(empty)'}")
    return domain


class DnsFetcher:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[DnsCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self._settings = settings or Settings.from_env()
        self._cache = cache or DnsCache()
        self._rate_limiter = rate_limiter or RateLimiter(rate=self._settings.dns_rate)

    def query_txt(self, domain: str) -> DnsResponse:
        """Cache first, then each resolver in order. NXDOMAIN is definitive."""
        domain = normalize_domain(domain)

        cached = self._cache.get(domain)
        if cached:
            logger.debug("cache hit for TXT %s", domain)
            return cached

        last_error: Optional[Exception] = None
        for resolver_ip in self._settings.resolvers:
            for attempt in range(self._settings.dns_retries):
                try:
                    self._rate_limiter.acquire()
                    response = self._query_resolver(resolver_ip, domain)
                except DnsNxdomainError:
                    response = DnsResponse(
                        domain=domain, record_type="TXT", status=DnsStatus.NXDOMAIN, resolver_used=resolver_ip,
                    )
                except (DnsTimeoutError, DnsServfailError) as exc:
                    logger.warning("TXT %s via %s failed (attempt %d): %s", domain, resolver_ip, attempt + 1, exc)
                    last_error = exc
                    continue
                self._cache.put(domain, response)
                return response

        raise DnsAllResolversExhaustedError(f"All DNS resolvers failed for TXT {domain}: {last_error}")

    def _query_resolver(self, resolver_ip: str, domain: str) -> DnsResponse:
        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = [resolver_ip]
        resolver.timeout = self._settings.dns_timeout
        resolver.lifetime = self._settings.dns_timeout

        start = time.monotonic()
        try:
            answer = resolver.resolve(domain, dns.rdatatype.TXT)
        except dns.resolver.NXDOMAIN:
            raise DnsNxdomainError(f"NXDOMAIN: {domain}")
        except dns.resolver.NoAnswer:
            records = []
        except dns.exception.Timeout:
            raise DnsTimeoutError(f"Timeout querying {resolver_ip} for TXT {domain}")
        except dns.resolver.NoNameservers:
            raise DnsServfailError(f"No nameservers available for {domain}")
        except dns.exception.DNSException as exc:
            raise DnsServfailError(f"DNS error from {resolver_ip}: {exc}")
        else:
            ttl = answer.rrset.ttl if answer.rrset else DnsCache.MIN_TTL
            # Multi-string TXT records are concatenated per RFC 7208 section 3.3
            records = [
                DnsRecord(record_type="TXT", value=b"".join(rdata.strings).decode("utf-8", errors="replace"), ttl=ttl)
                for rdata in answer
            ]

        elapsed = (time.monotonic() - start) * 1000
        logger.debug("TXT %s via %s: %d record(s) in %.1fms", domain, resolver_ip, len(records), elapsed)
        return DnsResponse(
            domain=domain,
            record_type="TXT",
            status=DnsStatus.NOERROR,
            records=records,
            resolver_used=resolver_ip,
            response_time_ms=elapsed,
        )


def create_fetcher(settings: Optional[Settings] = None) -> DnsFetcher:
    """Module-level factory for CLI and API use."""
    settings = settings or Settings.from_env()
    return DnsFetcher(settings=settings, cache=DnsCache(), rate_limiter=RateLimiter(rate=settings.dns_rate))


# ── Record Lookup ──────────────────────────────────────────────────────────────

class RecordLookup:
    def __init__(self, fetcher: DnsFetcher):
        self._fetcher = fetcher

    def lookup(
        self,
        domain: str,
        record_type: Union[str, RecordType],
        selector: Optional[str] = None,
    ) -> LookupResult:
        """Fetch the TXT set for one record type and pick the matching record."""
        rtype = coerce_record_type(record_type)
        domain = normalize_domain(domain)
        lookup_domain = self.lookup_domain(domain, rtype, selector)

        response = self._fetcher.query_txt(lookup_domain)
        values = [r.value for r in response.records]
        record = select_record(rtype, values)

        error = None
        if record is None:
            error = f"No {rtype.value.upper()} record found for {lookup_domain}"
            logger.info(error)

        return LookupResult(
            domain=domain,
            record_type=rtype,
            lookup_domain=lookup_domain,
            record=record,
            all_records=values,
            error=error,
        )

    @staticmethod
    def lookup_domain(domain: str, rtype: RecordType, selector: Optional[str]) -> str:
        if rtype == RecordType.DMARC:
            return f"_dmarc.{domain}"
        if rtype == RecordType.SPF:
            return domain
        selector = (selector or "").strip().lower()
        if not selector:
            raise InvalidSelectorError("Selector is required for DKIM lookups")
        if not re.match(r"^[a-z0-9](?:[a-z0-9\-_.]*[a-z0-9])?$", selector):
            raise InvalidSelectorError(f"Invalid DKIM selector: {selector}")
        return f"{selector}._domainkey.{domain}"


def select_record(rtype: RecordType, values: list) -> Optional[str]:
    """First TXT value that looks like a record of the requested type."""
    for value in values:
        stripped = value.strip()
        lower = stripped.lower()
        if rtype == RecordType.DMARC and lower.startswith("v=dmarc1"):
            return stripped
        if rtype == RecordType.SPF and lower.startswith("v=spf1"):
            return stripped
        if rtype == RecordType.DKIM and (lower.startswith("v=dkim1") or "k=rsa" in lower or "p=" in lower):
            return stripped
    return None
