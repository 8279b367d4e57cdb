"""Daily motivational quote shown on the dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Quote:
    text: str
    author: str | None = None


QUOTES: list[Quote] = [
    Quote("It ain't about how hard you hit. It's about how hard you can get hit and keep moving forward.",
          "Rocky Balboa"),
    Quote("Don't ever let somebody tell you you can't do something. Not even me.", "The Pursuit of Happyness"),
    Quote("Get busy living, or get busy dying.", "The Shawshank Redemption"),
    Quote("What we do in life echoes in eternity.", "Gladiator"),
    Quote("Why do we fall? So we can learn to pick ourselves up.", "Batman Begins"),
    Quote("Carpe diem. Seize the day, boys. Make your lives extraordinary.", "Dead Poets Society"),
    Quote("Every champion was once a contender that refused to give up.", "Rocky"),
    Quote("Great men are not born great, they grow great.", "The Godfather"),
    Quote("The saddest thing in life is wasted talent.", "A Bronx Tale"),
    Quote("One step at a time. One punch at a time. One round at a time.", "Creed"),
    Quote("There is no gene for the human spirit.", "Gattaca"),
    Quote("Theory will only take you so far.", "Oppenheimer"),
]


def daily_quote(today: date | None = None) -> Quote:
    """Deterministic quote for the calendar day: same quote all day."""
    day = today or date.today()
    return QUOTES[day.timetuple().tm_yday % len(QUOTES)]
