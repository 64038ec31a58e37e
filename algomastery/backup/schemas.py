"""Wire format for backup files.

Keys are camelCase and dates ISO-8601. The collections follow the web app's
naming, but a backup written by the web app will not verify here: its
checksum covers unsorted JSON that also holds collections this package
does not store.
"""

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from algomastery.db.models import (
    Difficulty,
    Problem,
    ProblemStatus,
    ReviewHistoryEntry,
    ReviewState,
)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProblemRecord(_Record):
    """A problem as it appears in a backup."""

    id: str = Field(min_length=1)
    title: str
    url: str | None = None
    topic: str
    difficulty: Difficulty
    status: ProblemStatus = ProblemStatus.UNSOLVED
    notes: str = ""
    created_at: AwareDatetime | None = Field(default=None, alias="createdAt")
    updated_at: AwareDatetime | None = Field(default=None, alias="updatedAt")

    @classmethod
    def from_model(cls, problem: Problem) -> "ProblemRecord":
        return cls(
            id=problem.id,
            title=problem.title,
            url=problem.url,
            topic=problem.topic,
            difficulty=problem.difficulty,
            status=problem.status,
            notes=problem.notes,
            created_at=problem.created_at,
            updated_at=problem.updated_at,
        )

    def to_model(self) -> Problem:
        return Problem(**self.model_dump())


class ReviewRecord(_Record):
    """SM-2 state for one problem."""

    id: int | None = None
    problem_id: str = Field(min_length=1, alias="problemId")
    easiness_factor: float = Field(ge=1.3, alias="easeFactor")
    interval_days: int = Field(ge=0, alias="interval")
    repetitions: int = Field(ge=0)
    next_review: AwareDatetime = Field(alias="nextReview")
    last_reviewed: AwareDatetime | None = Field(default=None, alias="lastReviewed")

    @classmethod
    def from_model(cls, state: ReviewState) -> "ReviewRecord":
        return cls(
            id=state.id,
            problem_id=state.problem_id,
            easiness_factor=state.easiness_factor,
            interval_days=state.interval_days,
            repetitions=state.repetitions,
            next_review=state.next_review,
            last_reviewed=state.last_reviewed,
        )

    def to_model(self) -> ReviewState:
        return ReviewState(**self.model_dump())


class HistoryRecord(_Record):
    """One logged rating."""

    id: str = Field(min_length=1)
    problem_id: str = Field(min_length=1, alias="problemId")
    quality: int = Field(ge=0, le=5)
    reviewed_at: AwareDatetime = Field(alias="reviewedAt")
    interval_before: int = Field(ge=0, alias="intervalBefore")
    interval_after: int = Field(ge=0, alias="intervalAfter")

    @classmethod
    def from_model(cls, entry: ReviewHistoryEntry) -> "HistoryRecord":
        return cls(
            id=entry.id,
            problem_id=entry.problem_id,
            quality=entry.quality,
            reviewed_at=entry.reviewed_at,
            interval_before=entry.interval_before,
            interval_after=entry.interval_after,
        )

    def to_model(self) -> ReviewHistoryEntry:
        return ReviewHistoryEntry(**self.model_dump())


class ExportPayload(_Record):
    """The collections carried by a backup."""

    problems: list[ProblemRecord]
    reviews: list[ReviewRecord]
    review_history: list[HistoryRecord] = Field(alias="reviewHistory")
