"""
Presentation layer for the embeddable pages.

Turns ranked leaderboard entries into display rows (rank label, medal,
stat lines) and renders the iframe-friendly HTML pages. Medals follow
the rank value, so two entries tied at #1 both get gold.
"""

import calendar
from html import escape
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel

from retroboard.models import (
    GameInfo,
    MonthlyEntry,
    MonthlyLeaderboard,
    NominationsResponse,
    YearlyEntry,
    YearlyLeaderboard,
)
from retroboard.ranking import RankMode
from retroboard.services.nominations import group_by_platform

DEFAULT_SITE_URL = "https://retroachievements.org"

MEDAL_CLASSES = {1: "medal-gold", 2: "medal-silver", 3: "medal-bronze"}

DEFAULT_GAME_ICON_FALLBACK = "/Images/017657.png"
DEFAULT_USER_PIC_FALLBACK = "/UserPic/_user.png"


class DisplayRow(BaseModel):
    rank: int
    rank_label: str
    medal_class: str
    username: str
    profile_url: str
    profile_image: str
    fallback_image: str
    stat_lines: List[str]


def medal_class(rank: Optional[int]) -> str:
    return MEDAL_CLASSES.get(rank or 0, "")


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stat_lines(entry: Union[MonthlyEntry, YearlyEntry], mode: RankMode) -> List[str]:
    if RankMode(mode) is RankMode.MONTHLY:
        return [
            f"{entry.completed_achievements}/{entry.total_achievements}",
            f"{format_number(entry.completion_percentage)}%",
        ]
    return [f"{format_number(entry.points)} points"]


def build_rows(
    entries: Sequence[Union[MonthlyEntry, YearlyEntry]],
    mode: RankMode,
    site_url: str = DEFAULT_SITE_URL,
) -> List[DisplayRow]:
    """Display rows for ranked entries, in the order given."""
    site_url = site_url.rstrip("/")
    rows = []
    for entry in entries:
        rank = entry.rank or 0
        rows.append(
            DisplayRow(
                rank=rank,
                rank_label=f"#{rank}",
                medal_class=medal_class(rank),
                username=entry.username,
                profile_url=entry.profile_url,
                profile_image=entry.profile_image,
                fallback_image=f"{site_url}{DEFAULT_USER_PIC_FALLBACK}",
                stat_lines=stat_lines(entry, mode),
            )
        )
    return rows


def game_icon_url(game_info: GameInfo, site_url: str = DEFAULT_SITE_URL) -> str:
    icon = game_info.image_icon
    if icon.startswith(("http://", "https://")):
        return icon
    return f"{site_url.rstrip('/')}{icon}"


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def challenge_window(period: str) -> str:
    """Human-readable span of a monthly period key (YYYY-MM)."""
    year, month = (int(part) for part in period.split("-", 1))
    month_name = calendar.month_name[month]
    last_day = calendar.monthrange(year, month)[1]
    return (
        f"This challenge runs from {month_name} {ordinal(1)}, {year} "
        f"to {month_name} {ordinal(last_day)}, {year}."
    )


# ============================================================================
# HTML rendering
# ============================================================================

_STYLE = """
body { margin: 0; background: #17254A; color: #fff; font-family: sans-serif; }
.tab-container { display: flex; }
.tab { flex: 1; padding: 12px; text-align: center; color: #8892b0; text-decoration: none; }
.tab.active { color: #fff; border-bottom: 2px solid #fff; }
.game-header { display: flex; align-items: center; gap: 12px; padding: 12px 16px; }
.game-header img { width: 64px; height: 64px; }
.challenge-list { padding: 0 16px 12px; font-size: 0.9rem; color: #ccd6f6; }
.leaderboard-entry { display: flex; align-items: center; gap: 12px; padding: 8px 0; }
.rank { width: 48px; font-weight: bold; }
.medal-gold { color: #ffd700; }
.medal-silver { color: #c0c0c0; }
.medal-bronze { color: #cd7f32; }
.profile-image { width: 40px; height: 40px; border-radius: 50%; }
.username { color: #64ffda; text-decoration: none; font-weight: bold; }
.platform-header { background: #2a3a6a; padding: 12px 16px; margin: 0; font-size: 1.125rem; }
.nomination { padding: 8px 16px; border-bottom: 1px solid #2a3a6a; }
.footer { font-size: 0.8rem; color: #8892b0; text-align: center; padding: 16px; border-top: 1px solid #2a3a6a; }
"""

_RESIZE_SCRIPT = """
<script>
function sendHeight() {
  var content = document.getElementById("%(container)s");
  if (content) {
    window.parent.postMessage(
      {type: "resize", height: content.getBoundingClientRect().height + %(padding)d},
      "*"
    );
  }
}
window.addEventListener("load", function () {
  sendHeight();
  setTimeout(sendHeight, 100);
  setTimeout(sendHeight, 1000);
});
document.querySelectorAll("time[data-local]").forEach(function (el) {
  el.textContent = new Date(el.getAttribute("datetime")).toLocaleString();
});
</script>
"""


def _page(
    title: str,
    body: str,
    container: str,
    refresh_seconds: int,
    padding: int = 0,
) -> str:
    script = _RESIZE_SCRIPT % {"container": container, "padding": padding}
    return (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n"
        "<meta charset=\"utf-8\">\n"
        f"<meta http-equiv=\"refresh\" content=\"{int(refresh_seconds)}\">\n"
        f"<title>{escape(title)}</title>\n"
        f"<style>{_STYLE}</style>\n"
        "</head>\n<body>\n"
        f"<div id=\"{container}\">\n{body}\n</div>\n"
        f"{script}"
        "</body>\n</html>\n"
    )


def _footer(last_updated: str) -> str:
    stamp = escape(last_updated)
    return (
        f"<div class=\"footer\">Last updated: "
        f"<time data-local datetime=\"{stamp}\">{stamp}</time></div>"
    )


def _render_rows(rows: List[DisplayRow]) -> str:
    parts = []
    for row in rows:
        stats = "".join(f"<div>{escape(line)}</div>" for line in row.stat_lines)
        parts.append(
            "<div class=\"leaderboard-entry\">"
            f"<div class=\"rank {row.medal_class}\">{escape(row.rank_label)}</div>"
            f"<img class=\"profile-image\" src=\"{escape(row.profile_image)}\" "
            f"alt=\"{escape(row.username)}\" "
            f"onerror=\"this.onerror=null;this.src='{escape(row.fallback_image)}'\">"
            "<div>"
            f"<a class=\"username\" href=\"{escape(row.profile_url)}\" "
            f"target=\"_blank\" rel=\"noopener noreferrer\">{escape(row.username)}</a>"
            f"{stats}</div></div>"
        )
    return "\n".join(parts)


def render_leaderboard_page(
    leaderboard: Union[MonthlyLeaderboard, YearlyLeaderboard],
    mode: RankMode,
    period: str,
    challenge_rules: Sequence[str] = (),
    site_url: str = DEFAULT_SITE_URL,
    refresh_seconds: int = 300,
) -> str:
    """Render the tabbed leaderboard page for one mode."""
    mode = RankMode(mode)
    tabs = (
        "<div class=\"tab-container\">"
        f"<a class=\"tab{' active' if mode is RankMode.MONTHLY else ''}\" "
        "href=\"?mode=monthly\">Monthly Challenge</a>"
        f"<a class=\"tab{' active' if mode is RankMode.YEARLY else ''}\" "
        "href=\"?mode=yearly\">Yearly Rankings</a>"
        "</div>"
    )

    header = ""
    if mode is RankMode.MONTHLY and isinstance(leaderboard, MonthlyLeaderboard):
        game = leaderboard.game_info
        fallback = f"{site_url.rstrip('/')}{DEFAULT_GAME_ICON_FALLBACK}"
        rules = [challenge_window(period)] + list(challenge_rules)
        header = (
            "<div class=\"game-header\">"
            f"<img src=\"{escape(game_icon_url(game, site_url))}\" alt=\"{escape(game.title)}\" "
            f"onerror=\"this.onerror=null;this.src='{escape(fallback)}'\">"
            f"<h2 class=\"game-title\">{escape(game.title)}</h2></div>"
            "<div class=\"challenge-list\">"
            + "<br>".join(f"&gt; {escape(rule)}" for rule in rules)
            + "</div>"
        )

    rows = build_rows(leaderboard.leaderboard, mode, site_url)
    body = (
        f"{tabs}\n{header}\n"
        f"<div style=\"padding: 16px\">\n{_render_rows(rows)}\n</div>\n"
        f"{_footer(leaderboard.last_updated)}"
    )
    return _page("Leaderboard", body, "leaderboard-container", refresh_seconds)


def render_nominations_page(
    response: NominationsResponse,
    refresh_seconds: int = 300,
) -> str:
    """Render nominations grouped by platform."""
    status = "Nominations are open" if response.is_open else "Nominations are closed"
    sections = []
    for group in group_by_platform(response.nominations):
        games = "".join(
            "<div class=\"nomination\">"
            f"<div>{escape(n.game)}</div>"
            f"<div style=\"color: #8892b0; font-size: 0.85rem\">"
            f"Nominated by {escape(n.discord_username)}</div></div>"
            for n in group.nominations
        )
        sections.append(
            f"<div><h3 class=\"platform-header\">{escape(group.full_name)}</h3>{games}</div>"
        )

    body = (
        "<div class=\"game-header\"><span role=\"img\" aria-label=\"game controller\">"
        "&#127918;</span><h2 style=\"margin: 0\">Game Nominations</h2></div>\n"
        f"<div class=\"challenge-list\">{status}</div>\n"
        + "\n".join(sections)
        + f"\n{_footer(response.last_updated)}"
    )
    return _page("Game Nominations", body, "nominations-content", refresh_seconds, padding=100)
