"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from alumni_network.api.routes.auth_routes import router as auth_router
from alumni_network.api.routes.university_routes import router as university_router
from alumni_network.api.routes.profile_routes import router as profile_router
from alumni_network.api.routes.credential_routes import router as credential_router
from alumni_network.api.routes.connection_routes import router as connection_router
from alumni_network.api.routes.job_application_routes import router as job_application_router
from alumni_network.api.routes.job_routes import router as job_router
from alumni_network.api.routes.scholarship_application_routes import router as scholarship_application_router
from alumni_network.api.routes.scholarship_routes import router as scholarship_router
from alumni_network.api.routes.curriculum_feedback_routes import router as curriculum_feedback_router
from alumni_network.api.routes.newsletter_routes import router as newsletter_router
from alumni_network.api.routes.event_routes import router as event_router
from alumni_network.api.routes.conversation_routes import router as conversation_router
from alumni_network.api.routes.message_routes import router as message_router
from alumni_network.api.routes.notification_routes import router as notification_router
from alumni_network.api.routes.post_routes import router as post_router
from alumni_network.api.routes.exam_result_routes import router as exam_result_router
from alumni_network.api.routes.admin_user_routes import router as admin_user_router
from alumni_network.api.routes.recommendation_routes import router as recommendation_router
from alumni_network.api.routes.gamification_routes import router as gamification_router
from alumni_network.api.routes.mirror_routes import router as mirror_router

# Main API router
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(university_router)
api_router.include_router(profile_router)
api_router.include_router(credential_router)
api_router.include_router(connection_router)

# Applications are served under both paths; sub-paths go before their parents
api_router.include_router(job_application_router, prefix="/job-applications")
api_router.include_router(job_application_router, prefix="/jobs/applications")
api_router.include_router(job_router)
api_router.include_router(scholarship_application_router)
api_router.include_router(scholarship_router)

api_router.include_router(curriculum_feedback_router)
api_router.include_router(newsletter_router)
api_router.include_router(event_router)
api_router.include_router(conversation_router)
api_router.include_router(message_router)
api_router.include_router(notification_router)
api_router.include_router(post_router)
api_router.include_router(exam_result_router)
api_router.include_router(admin_user_router)
api_router.include_router(recommendation_router)
api_router.include_router(gamification_router)
api_router.include_router(mirror_router)
