from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from app.core.knowledge_data import EDUCATION, REPORTS, EducationEntry, ReportEntry

MIN_REPORT_TOKEN_LEN = 3
MIN_EDUCATION_WORD_LEN = 4


@dataclass(frozen=True)
class ScoredReport:
    report: ReportEntry
    score: int


class KnowledgeIndex:
    """Static glossary + report lookup. Keyword scoring only, no network."""

    def __init__(
        self,
        education: Mapping[str, EducationEntry] = EDUCATION,
        reports: Iterable[ReportEntry] = REPORTS,
    ) -> None:
        self.education = education
        self.reports = tuple(reports)

    def search_education(self, query: str) -> list[EducationEntry]:
        q = query.lower()
        matches: list[EducationEntry] = []
        for key, entry in self.education.items():
            if key in q or any(len(word) >= MIN_EDUCATION_WORD_LEN and word in q for word in key.split()):
                matches.append(entry)
        return matches

    def search_reports(self, query: str) -> list[ScoredReport]:
        words = [w for w in query.lower().split() if len(w) >= MIN_REPORT_TOKEN_LEN]
        scored: list[ScoredReport] = []
        for report in self.reports:
            keywords = [k.lower() for k in report.keywords]
            haystack = f"{report.title} {report.category} {report.summary} {' '.join(keywords)}".lower()
            score = 0
            for word in words:
                if word in haystack:
                    score += 1
                if any(word in k for k in keywords):
                    score += 2
            if score > 0:
                scored.append(ScoredReport(report, score))
        # sorted() is stable, so equal scores keep catalogue order
        return sorted(scored, key=lambda item: item.score, reverse=True)
