"""Built-in sensitive-domain filtering for visits and searches.

Each category is a curated list of well-known hosts. An entry matches its
exact host or any subdomain of it; an entry with a path
(``reddit.com/r/tifu``) matches URLs on that host whose path starts with
it. ``custom_domains`` from config join under the ``custom`` category.

With ``action="exclude"`` matching records are dropped. With
``action="redact"`` a visit keeps its time but its URL points at a
placeholder host for the category and its title becomes the category
label; a search keeps its time and engine but its query is replaced.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from daydigest.core.config import SensitivityConfig
from daydigest.core.errors import ConfigError
from daydigest.core.models import BrowserVisit, SearchQuery
from daydigest.filter.urls import parse_url

REDACTED_HOST_SUFFIX = "redacted.invalid"
SENSITIVE_SEARCH = "[SENSITIVE_SEARCH]"


@dataclass(frozen=True)
class SensitivityCategory:
    label: str
    description: str
    domains: tuple[str, ...] = ()


CATEGORY_REGISTRY: dict[str, SensitivityCategory] = {
    "adult": SensitivityCategory(
        "Adult Content",
        "Adult entertainment, explicit content, escort services",
        (
            "pornhub.com", "xvideos.com", "xnxx.com", "xhamster.com", "redtube.com",
            "youporn.com", "spankbang.com", "chaturbate.com", "myfreecams.com",
            "livejasmin.com", "stripchat.com", "onlyfans.com", "fansly.com",
            "manyvids.com", "eporner.com", "porn.com", "sex.com", "nhentai.net",
            "rule34.xxx", "e-hentai.org", "literotica.com", "motherless.com",
            "skipthegames.com", "tryst.link",
        ),
    ),
    "gambling": SensitivityCategory(
        "Gambling & Betting",
        "Online casinos, sportsbooks, lotteries, crypto gambling",
        (
            "draftkings.com", "fanduel.com", "betmgm.com", "bet365.com",
            "williamhill.com", "paddypower.com", "betfair.com", "unibet.com",
            "pokerstars.com", "bovada.lv", "betway.com", "betrivers.com",
            "stake.com", "roobet.com", "rollbit.com", "lottery.com",
            "jackpocket.com", "oddschecker.com", "prizepicks.com", "cloudbet.com",
        ),
    ),
    "dating": SensitivityCategory(
        "Dating & Relationships",
        "Dating apps, matchmaking, hookup platforms",
        (
            "tinder.com", "bumble.com", "hinge.co", "match.com", "okcupid.com",
            "plentyoffish.com", "pof.com", "zoosk.com", "eharmony.com",
            "elitesingles.com", "coffee-meets-bagel.com", "happn.com", "badoo.com",
            "grindr.com", "scruff.com", "feeld.co", "seeking.com", "theleague.com",
            "raya.com",
        ),
    ),
    "health": SensitivityCategory(
        "Health & Medical",
        "Patient portals, telehealth, prescriptions, mental health, insurance",
        (
            "mychart.com", "patient.info", "webmd.com", "mayoclinic.org",
            "healthline.com", "medlineplus.gov", "nhs.uk", "drugs.com", "goodrx.com",
            "teladoc.com", "hims.com", "forhers.com", "cerebral.com",
            "betterhelp.com", "talkspace.com", "psychologytoday.com",
            "healthcare.gov", "cigna.com", "aetna.com", "unitedhealthcare.com",
            "kaiserpermanente.org", "plannedparenthood.org",
            "questdiagnostics.com", "labcorp.com", "cvs.com/pharmacy",
        ),
    ),
    "finance": SensitivityCategory(
        "Banking & Finance",
        "Banks, brokerages, crypto exchanges, tax, credit, insurance, loans",
        (
            "chase.com", "bankofamerica.com", "wellsfargo.com", "citi.com",
            "capitalone.com", "ally.com", "sofi.com", "chime.com", "schwab.com",
            "fidelity.com", "vanguard.com", "etrade.com", "robinhood.com",
            "webull.com", "coinbase.com", "binance.com", "kraken.com",
            "turbotax.com", "hrblock.com", "irs.gov", "creditkarma.com",
            "experian.com", "equifax.com", "transunion.com", "paypal.com",
            "venmo.com", "lendingtree.com", "stripe.com/dashboard",
        ),
    ),
    "drugs": SensitivityCategory(
        "Drugs & Substances",
        "Cannabis dispensaries, drug info, vaping, nootropics",
        (
            "leafly.com", "weedmaps.com", "dutchie.com", "eaze.com", "erowid.org",
            "bluelight.org", "psychonautwiki.org", "tripsit.me", "juul.com",
            "nootropicsdepot.com",
        ),
    ),
    "weapons": SensitivityCategory(
        "Weapons & Firearms",
        "Gun retailers, ammunition, tactical gear, firearms forums",
        (
            "budsgunshop.com", "palmettostatearmory.com", "brownells.com",
            "midwayusa.com", "ammo.com", "gunbroker.com", "armslist.com",
            "bladehq.com", "glock.com", "sigsauer.com", "ruger.com", "ar15.com",
        ),
    ),
    "piracy": SensitivityCategory(
        "Piracy & Torrents",
        "Torrent sites, pirated streaming, cracked software",
        (
            "thepiratebay.org", "1337x.to", "nyaa.si", "yts.mx", "torrentgalaxy.to",
            "rutracker.org", "fitgirl-repacks.site", "fmovies.to", "soap2day.to",
            "crackstreams.is", "9anime.to", "getintopc.com", "rapidgator.net",
        ),
    ),
    "vpn_proxy": SensitivityCategory(
        "VPN & Proxy",
        "VPN services, proxy tools, DNS privacy",
        (
            "nordvpn.com", "expressvpn.com", "surfshark.com", "protonvpn.com",
            "mullvad.net", "windscribe.com", "privateinternetaccess.com",
            "hidemyass.com", "kproxy.com", "nextdns.io",
        ),
    ),
    "job_search": SensitivityCategory(
        "Job Search",
        "Job boards, salary info, interview prep, freelance platforms",
        (
            "linkedin.com/jobs", "indeed.com", "glassdoor.com", "ziprecruiter.com",
            "monster.com", "dice.com", "hired.com", "wellfound.com", "levels.fyi",
            "teamblind.com", "upwork.com", "fiverr.com", "toptal.com",
            "weworkremotely.com", "remoteok.com", "payscale.com", "usajobs.gov",
        ),
    ),
    "social_personal": SensitivityCategory(
        "Personal & Sensitive Social",
        "Confessional forums, gossip, astrology, personal ads",
        (
            "reddit.com/r/tifu", "reddit.com/r/confessions",
            "reddit.com/r/relationship_advice", "reddit.com/r/amitheasshole",
            "reddit.com/r/offmychest", "whisper.sh", "postsecret.com", "tmz.com",
            "deuxmoi.com", "craigslist.org/personals", "co-star.com", "keen.com",
        ),
    ),
    "tracker": SensitivityCategory(
        "Email Trackers",
        "Email marketing click-tracker redirects with no browsable content",
        (
            "ct.sendgrid.net", "list-manage.com", "mandrillapp.com", "mailchi.mp",
            "rs6.net", "hubspotemail.net", "exacttarget.com", "exct.net",
            "pardot.com", "activehosted.com", "click.marketo.com", "createsend.com",
            "klaviyomail.com", "click.braze.com", "links.iterable.com",
            "convertkit-mail.com", "pstmrk.it",
        ),
    ),
    "auth": SensitivityCategory(
        "Auth / SSO Flows",
        "OAuth consent screens and identity-provider login pages",
        (
            "accounts.google.com", "login.microsoftonline.com", "login.live.com",
            "appleid.apple.com", "idmsa.apple.com", "login.salesforce.com",
            "github.com/login/oauth", "okta.com", "auth0.com", "sso.google.com",
        ),
    ),
    "custom": SensitivityCategory("Custom", "Your personal exclusion list"),
}


def category_label(category: str) -> str:
    info = CATEGORY_REGISTRY.get(category)
    return info.label if info else category


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


@dataclass
class DomainMatcher:
    """Host and host+path lookup built from the enabled categories."""

    hosts: dict[str, str] = field(default_factory=dict)
    path_prefixes: dict[str, list[tuple[str, str]]] = field(default_factory=dict)

    def add(self, entry: str, category: str) -> None:
        entry = entry.strip().lower()
        if not entry:
            return
        host, slash, path = entry.partition("/")
        host = _strip_www(host)
        if slash:
            self.path_prefixes.setdefault(host, []).append(("/" + path, category))
        else:
            self.hosts.setdefault(host, category)

    def match(self, host: str, path: str = "/") -> str | None:
        """Category of ``host``/``path``, or None when nothing matches."""
        host = _strip_www(host.lower())
        category = self.hosts.get(host)
        if category:
            return category
        for domain, domain_category in self.hosts.items():
            if host.endswith("." + domain):
                return domain_category

        path = path.lower()
        for domain, prefixes in self.path_prefixes.items():
            if host == domain or host.endswith("." + domain):
                for prefix, prefix_category in prefixes:
                    if path.startswith(prefix):
                        return prefix_category
        return None

    def host_pattern(self) -> re.Pattern[str] | None:
        """Regex finding any listed host as a whole token inside free text."""
        if not self.hosts:
            return None
        alternatives = "|".join(re.escape(h) for h in sorted(self.hosts, key=len, reverse=True))
        return re.compile(rf"(?<![\w.-])(?:{alternatives})(?![\w-])", re.IGNORECASE)


def is_active(config: SensitivityConfig) -> bool:
    return config.enabled and bool(config.categories or config.custom_domains)


def build_matcher(config: SensitivityConfig) -> DomainMatcher:
    """Collect the domains of every enabled category plus the custom list.

    Raises:
        ConfigError: a category name is not in :data:`CATEGORY_REGISTRY`.
    """
    matcher = DomainMatcher()
    for category in config.categories:
        info = CATEGORY_REGISTRY.get(category)
        if info is None:
            known = ", ".join(sorted(CATEGORY_REGISTRY))
            raise ConfigError(f"Unknown sensitivity category {category!r}. Expected one of: {known}")
        for domain in info.domains:
            matcher.add(domain, category)
    for domain in config.custom_domains:
        matcher.add(domain, "custom")
    return matcher


def _redacted_visit(visit: BrowserVisit, category: str) -> BrowserVisit:
    host = f"{category.replace('_', '-')}.{REDACTED_HOST_SUFFIX}"
    return replace(
        visit,
        url=f"https://{host}/",
        title=f"[{category_label(category)}]",
        domain=host,
    )


def filter_sensitive_visits(
    visits: list[BrowserVisit], config: SensitivityConfig,
) -> tuple[list[BrowserVisit], dict[str, int]]:
    """Apply the sensitivity action to visits on listed hosts.

    Returns the kept visits and per-category match counts. Visits with
    unparsable URLs are kept unchanged.
    """
    if not is_active(config):
        return list(visits), {}

    matcher = build_matcher(config)
    kept: list[BrowserVisit] = []
    by_category: dict[str, int] = {}
    for visit in visits:
        parts = parse_url(visit.url)
        category = matcher.match(parts.hostname or "", parts.path or "/") if parts else None
        if category is None:
            kept.append(visit)
            continue
        by_category[category] = by_category.get(category, 0) + 1
        if config.action == "redact":
            kept.append(_redacted_visit(visit, category))
    return kept, by_category


def filter_sensitive_searches(
    searches: list[SearchQuery], config: SensitivityConfig,
) -> tuple[list[SearchQuery], int]:
    """Apply the sensitivity action to queries naming a listed host."""
    if not is_active(config):
        return list(searches), 0

    pattern = build_matcher(config).host_pattern()
    if pattern is None:
        return list(searches), 0

    kept: list[SearchQuery] = []
    filtered = 0
    for search in searches:
        if not pattern.search(search.query):
            kept.append(search)
            continue
        filtered += 1
        if config.action == "redact":
            kept.append(replace(search, query=SENSITIVE_SEARCH))
    return kept, filtered
