"""Channel directory — group/channel scraping from 101.ru plus a JSON cache."""
import json
import logging
import time
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from . import config
from .errors import SetupError
from .models import Channel, ChannelGroup

logger = logging.getLogger(__name__)

GROUPS_PATH = "/radio-top"
GROUP_PATH = "/radio-group/group/{group_id}"

_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36"
}


def _id_from_href(href: str) -> Optional[int]:
    """Last path segment of a link, as an int. None when it isn't numeric."""
    name = PurePosixPath(urlparse(href).path.rstrip("/")).name
    try:
        return int(name)
    except ValueError:
        return None


def parse_groups(html: str) -> dict[int, ChannelGroup]:
    soup = BeautifulSoup(html, "html.parser")
    groups: dict[int, ChannelGroup] = {}
    for li in soup.select("ul.full.list.menu li"):
        link = li.find("a")
        if link is None or not link.get("href"):
            continue
        gid = _id_from_href(link["href"])
        if gid is None:
            continue
        groups[gid] = ChannelGroup(gid, link.get_text(strip=True), {})
    return groups


def parse_channels(html: str) -> dict[int, Channel]:
    soup = BeautifulSoup(html, "html.parser")
    channels: dict[int, Channel] = {}
    for li in soup.select("ul.list.list-channels li"):
        link = li.find("a")
        if link is None or not link.get("href"):
            continue
        cid = _id_from_href(link["href"])
        if cid is None:
            continue
        title_el = link.select_one(".h3")
        title = title_el.get_text(strip=True) if title_el else link.get_text(strip=True)
        channels[cid] = Channel(cid, title)
    return channels


async def _get_html(client: httpx.AsyncClient, url: str) -> str:
    try:
        r = await client.get(url)
    except httpx.HTTPError as e:
        raise SetupError(f"Couldn't fetch {url}: {e}")
    if not r.is_success:
        raise SetupError(f"Couldn't fetch {url}: HTTP {r.status_code}")
    return r.text


async def scrape_directory(
    origin: str = config.BASE_ORIGIN,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[int, ChannelGroup]:
    """Fetch every group, then every group's channels."""
    async with httpx.AsyncClient(
        timeout=config.HTTP_TIMEOUT,
        headers=_HEADERS,
        follow_redirects=True,
        transport=transport,
    ) as client:
        groups = parse_groups(await _get_html(client, origin + GROUPS_PATH))
        if not groups:
            raise SetupError("No channel groups found on the directory page.")
        for gid, group in groups.items():
            html = await _get_html(client, origin + GROUP_PATH.format(group_id=gid))
            group.channels = parse_channels(html)
            logger.debug("Group %d (%s): %d channels", gid, group.title, len(group.channels))
    return groups


def read_cache(path=None, ttl: int = None) -> Optional[dict[int, ChannelGroup]]:
    """Cached directory if present and fresh, else None."""
    path = path or config.DIRECTORY_CACHE
    ttl = config.CACHE_TTL if ttl is None else ttl
    if not path.exists():
        logger.debug("Cache file %s doesn't exist, need generate.", path)
        return None
    age = time.time() - path.stat().st_mtime
    if age > ttl:
        logger.debug("Cache file %s is deprecated, need regenerate.", path)
        return None
    try:
        raw = json.loads(path.read_text())
        groups = {int(gid): ChannelGroup.from_dict(g) for gid, g in raw.items()}
    except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError, AttributeError) as e:
        logger.debug("Cache file %s unreadable (%s), need regenerate.", path, e)
        return None
    logger.debug("Cache hit, reading file %s", path)
    return groups


def write_cache(groups: dict[int, ChannelGroup], path=None):
    """Atomic write — write to tmp then replace."""
    path = path or config.DIRECTORY_CACHE
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps({str(gid): g.to_dict() for gid, g in groups.items()}, indent=2))
    tmp.replace(path)
    logger.debug("Write groups and channels data to cache file %s", path)


async def load_directory(
    refresh: bool = False,
    path=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[int, ChannelGroup]:
    if not refresh:
        cached = read_cache(path)
        if cached:
            return cached
    groups = await scrape_directory(transport=transport)
    try:
        write_cache(groups, path)
    except OSError as e:
        logger.warning("Could not write directory cache: %s", e)
    return groups


def find_channel(groups: dict[int, ChannelGroup], channel_id: int) -> tuple[ChannelGroup, Channel]:
    for group in groups.values():
        channel = group.channels.get(channel_id)
        if channel is not None:
            return group, channel
    raise SetupError(f"Channel {channel_id} not found in any group.")
