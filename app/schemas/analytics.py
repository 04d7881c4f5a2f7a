from pydantic import BaseModel
from typing import List, Optional


class ScoreBucket(BaseModel):
    range: str
    count: int


class Performer(BaseModel):
    session_id: int
    user_id: int
    name: str
    score: int
    passed: bool


class QuestionStat(BaseModel):
    question_id: int
    stem: str
    total_attempts: int
    percent_correct: int


class WeeklyTrendPoint(BaseModel):
    week: str
    week_start: str
    avg_score: int
    completions: int


class ScoreStats(BaseModel):
    total_attempts: int
    avg_score: int
    median_score: int
    pass_rate: int
    score_distribution: List[ScoreBucket]
    top_performers: List[Performer]
    bottom_performers: List[Performer]


class AssessmentSummary(ScoreStats):
    assessment_id: int
    title: str
    question_count: int
    time_limit_minutes: int
    pass_score: int
    question_stats: List[QuestionStat] = []


class AssessmentBreakdown(BaseModel):
    id: int
    title: str
    status: str
    sessions: int
    completed_count: int
    avg_score: int
    pass_rate: int


class OrganizationSummary(ScoreStats):
    org_id: int
    name: Optional[str] = None
    total_assessments: int
    published_assessments: int
    total_sessions: int
    completed_sessions: int
    timed_out_sessions: int
    unique_candidates: int
    assessment_stats: List[AssessmentBreakdown] = []
    weekly_trend: List[WeeklyTrendPoint] = []
