import math
from datetime import datetime
from urllib.parse import urlsplit


# Simply returns the current local time as an ISO8601 string with timezone offset.
def now_iso():
    return datetime.now().astimezone().isoformat()


# Formats seconds as MM:SS. Works off the floored absolute value, and minutes keep counting past 59.
def format_time(seconds):
    seconds = abs(math.floor(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


# Per-participant allocation in whole seconds. Leftover seconds from the division are dropped.
def calculate_time_per_participant(total_time_minutes, participant_count):
    if participant_count == 0:
        return 0
    return math.floor(total_time_minutes * 60 / participant_count)


# Checks whether a page URL belongs to the configured host, e.g. "https://www.linear.app/team" vs "linear.app".
# Either side containing the other counts as a match. Input that isn't an absolute URL is a miss, while a URL
# without a host (about:blank) has an empty host, which every pattern contains.
def matches_host(current_url, host_url):
    try:
        parts = urlsplit(current_url)
    except (ValueError, TypeError, AttributeError):
        return False
    if not parts.scheme:
        return False
    current_host = (parts.hostname or "").replace("www.", "", 1)

    configured_host = host_url.replace("www.", "", 1)
    for prefix in ("https://", "http://"):
        if configured_host.startswith(prefix):
            configured_host = configured_host[len(prefix):]
            break
    configured_host = configured_host.split("/")[0]

    return configured_host in current_host or current_host in configured_host
