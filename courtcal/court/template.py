"""
Court templates – world coordinates of every drawable reference line.

Badminton (doubles outline, 13.40 x 6.10 m):

    ┌──────────┬──────────┐  y = 13.40  baseline-far
    ├──────────┴──────────┤  y = 12.64  service-long-doubles-far
    │          │          │
    ├──────────┴──────────┤  y =  8.68  service-short-far
    │                     │  y =  6.70  net
    ├──────────┬──────────┤  y =  4.72  service-short
    │          │          │             center-line (x = 3.05)
    ├──────────┴──────────┤  y =  0.76  service-long-doubles
    └─────────────────────┘  y =  0     baseline
   x=0                  x=6.10

Tennis (doubles outline, 23.77 x 10.97 m) follows the same frame with the
service lines 6.40 m either side of the net and the center service line
joining them.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from ..errors import InvalidInput
from ..models.court import CourtLine, CourtModel, LineAxis, Sport
import config


def _across(line_id: str, y: float, x1: float, x2: float) -> CourtLine:
    return CourtLine(line_id, (x1, y, 0.0), (x2, y, 0.0), LineAxis.ACROSS)


def _along(line_id: str, x: float, y1: float, y2: float) -> CourtLine:
    return CourtLine(line_id, (x, y1, 0.0), (x, y2, 0.0), LineAxis.ALONG)


def _index(lines: List[CourtLine]) -> Dict[str, CourtLine]:
    return {line.id: line for line in lines}


# ── Badminton ─────────────────────────────────────────────────────────────────

def _badminton() -> CourtModel:
    L  = config.BADMINTON_LENGTH
    W  = config.BADMINTON_WIDTH
    SW = config.BADMINTON_SINGLES_WIDTH
    net   = L / 2
    short = net - config.BADMINTON_SHORT_SERVICE_DIST     # 4.72
    long_ = config.BADMINTON_LONG_SERVICE_DIST            # 0.76
    cx    = W / 2
    inset = (W - SW) / 2

    lines = [
        _across("baseline",                 0.0,         0.0, W),
        _across("baseline-far",             L,           0.0, W),
        _across("service-long-doubles",     long_,       0.0, W),
        _across("service-long-doubles-far", L - long_,   0.0, W),
        _across("service-short",            short,       0.0, W),
        _across("service-short-far",        L - short,   0.0, W),
        _along("center-line",               cx,  0.0,       short),
        _along("center-line-far",           cx,  L - short, L),
        _along("sideline-left",             0.0, 0.0, L),
        _along("sideline-right",            W,   0.0, L),
        _along("sideline-singles-left",     inset,     0.0, L),
        _along("sideline-singles-right",    W - inset, 0.0, L),
    ]
    return CourtModel(
        sport          = Sport.BADMINTON,
        length         = L,
        width          = W,
        singles_width  = SW,
        net_height     = config.BADMINTON_NET_HEIGHT,
        lines          = _index(lines),
        required_lines = ("service-long-doubles", "center-line", "service-short"),
    )


# ── Tennis ────────────────────────────────────────────────────────────────────

def _tennis() -> CourtModel:
    L  = config.TENNIS_LENGTH
    W  = config.TENNIS_WIDTH
    SW = config.TENNIS_SINGLES_WIDTH
    net     = L / 2
    service = net - config.TENNIS_SERVICE_DIST            # 5.485
    cx      = W / 2
    inset   = (W - SW) / 2

    lines = [
        _across("baseline",               0.0,           0.0, W),
        _across("baseline-far",           L,             0.0, W),
        _across("service-line",           service,       inset, W - inset),
        _across("service-line-far",       L - service,   inset, W - inset),
        _along("center-service-line",     cx,  service, L - service),
        _along("sideline-left",           0.0, 0.0, L),
        _along("sideline-right",          W,   0.0, L),
        _along("sideline-singles-left",   inset,     0.0, L),
        _along("sideline-singles-right",  W - inset, 0.0, L),
    ]
    return CourtModel(
        sport          = Sport.TENNIS,
        length         = L,
        width          = W,
        singles_width  = SW,
        net_height     = config.TENNIS_NET_HEIGHT,
        lines          = _index(lines),
        required_lines = ("baseline", "center-service-line", "service-line"),
    )


_BUILDERS = {
    Sport.BADMINTON: _badminton,
    Sport.TENNIS:    _tennis,
}


def supported_sports() -> Tuple[str, ...]:
    return tuple(s.value for s in _BUILDERS)


def parse_sport(sport) -> Sport:
    if isinstance(sport, Sport):
        return sport
    try:
        return Sport(str(sport).lower())
    except ValueError:
        raise InvalidInput(
            f"Unsupported sport {sport!r}; expected one of {supported_sports()}"
        ) from None


def get_court_model(sport) -> CourtModel:
    """Court geometry for a sport name or Sport member."""
    return _BUILDERS[parse_sport(sport)]()
