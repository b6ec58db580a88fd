# ABOUTME: Pluggable lookup for remediation suggestions and instructional resources.
# ABOUTME: Content is curated elsewhere; this module only matches it to subjects and topics.

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Resource:
    id: str
    title: str
    channel: str
    url: str
    topics: Tuple[str, ...] = ()
    description: str = ""

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "channel": self.channel,
            "url": self.url,
            "topics": list(self.topics),
            "description": self.description,
        }


DEFAULT_LIBRARY: Mapping[str, Sequence[Resource]] = {
    "math": (
        Resource(
            id="v1",
            title="Algebra Basics: What Is Algebra?",
            channel="Math Antics",
            url="https://www.youtube.com/watch?v=NybHckSEQBI",
            topics=("Algebra", "Equations", "Variables"),
            description="An introduction to the fundamentals of algebraic thinking.",
        ),
        Resource(
            id="v2",
            title="Introduction to equations",
            channel="Khan Academy",
            url="https://www.youtube.com/watch?v=vDqOoI-4Z6M",
            topics=("Equations", "Linear Equations"),
            description="Represent balanced relationships using math.",
        ),
    ),
    "science": (
        Resource(
            id="v4",
            title="Newton's First Law of Motion",
            channel="Crash Course",
            url="https://www.youtube.com/watch?v=T1ux9D7-O38",
            topics=("Physics", "Mechanics", "Newton's Laws"),
            description="Inertia and objects at rest.",
        ),
    ),
}

SUBJECT_ALIASES = {"physics": "science", "biology": "science", "chemistry": "science"}


class ResourceLookup:
    """Matches curated resources to a subject and optional struggle topic."""

    def __init__(self, library: Optional[Mapping[str, Sequence[Resource]]] = None, fallback_subject: str = "math"):
        self.library = DEFAULT_LIBRARY if library is None else library
        self.fallback_subject = fallback_subject

    def remediation_steps(self, topic: str) -> Tuple[str, ...]:
        return (
            f"Review {topic} fundamentals",
            "Practice with additional exercises",
            "Watch educational videos on this topic",
            "Ask teacher for extra help",
        )

    def recommend(self, subject: Optional[str], struggle_topic: Optional[str] = None, limit: int = 2) -> List[Resource]:
        key = str(subject or self.fallback_subject).lower()
        key = SUBJECT_ALIASES.get(key, key)
        shelf = list(self.library.get(key) or self.library.get(self.fallback_subject) or ())
        if not struggle_topic:
            return shelf[:limit]

        needle = struggle_topic.lower()
        matched = [
            r for r in shelf if needle in r.title.lower() or any(needle in t.lower() for t in r.topics)
        ]
        return matched if matched else shelf[:limit]


def recommendation_reason(struggle_topic: Optional[str], student_count: int) -> str:
    if not struggle_topic:
        return "General enhancement for your current curriculum."
    verb = "students are" if student_count > 1 else "student is"
    return f"{student_count} {verb} currently struggling with {struggle_topic}. These resources cover the core concepts."
