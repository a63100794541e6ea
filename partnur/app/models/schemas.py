"""
Pydantic models for request/response validation
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Chat request - accepted from the JSON body or the query string"""
    mobile_number: str = Field(..., min_length=1, description="User's mobile number, e.g. +919876543210")
    message: str = Field(..., min_length=1, description="User's message")
    session_id: Optional[str] = Field(default=None, description="Optional conversation session id")


class ChatResponse(BaseModel):
    """Chat response"""
    response: str
    profile_completion: int = Field(..., ge=0, le=100)
    extracted_info: Dict[str, Any] = {}
    suggestions: List[str] = []


class SmartFeatures(BaseModel):
    """Extra guidance returned by the enhanced chat endpoint"""
    smart_questions: List[str] = []
    seasonal_tip: Optional[str] = None
    business_insights: List[str] = []
    contextual_tips: List[str] = []


class AnalyticsPreview(BaseModel):
    """Last 7 days of activity"""
    total_conversations: int = 0
    avg_response_time: float = 0


class EnhancedChatResponse(BaseModel):
    """Enhanced chat response"""
    success: bool = True
    response: str
    profile_completion: int = Field(..., ge=0, le=100)
    extracted_info: Dict[str, Any] = {}
    suggestions: List[str] = []
    smart_features: SmartFeatures
    analytics_preview: AnalyticsPreview
    context_used: Dict[str, Any] = {}
    response_time_ms: int
    timestamp: str


class ProfileResponse(BaseModel):
    """Stored profile with its completion score"""
    profile: Dict[str, Any]
    completion_score: int


class AnalyticsResponse(BaseModel):
    """Per-user conversation analytics"""
    success: bool = True
    mobile_number: str
    analytics: Dict[str, Any]
    activity_summary: Optional[Dict[str, Any]] = None
    profile_completion: int
    generated_at: str


class TrendsSummary(BaseModel):
    total_profiles: int
    average_completion: int
    business_types: Dict[str, int] = {}


class TrendsResponse(BaseModel):
    """Platform-wide completion trends"""
    success: bool = True
    summary: TrendsSummary
    trends: List[Dict[str, Any]]
    generated_at: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
