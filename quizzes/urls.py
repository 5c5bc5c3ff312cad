"""URL routing for attempt, result, leaderboard and statistics APIs."""

from django.urls import re_path

from . import views

urlpatterns = [
    re_path(r"^api/attempts/start$", views.attempt_start_view, name="attempt-start"),
    re_path(r"^api/attempts/submit$", views.attempt_submit_view, name="attempt-submit"),
    re_path(r"^api/attempts/me$", views.my_attempts_view, name="attempt-list-mine"),
    re_path(r"^api/attempts/(?P<attempt_id>[0-9]+)$", views.attempt_detail_view, name="attempt-detail"),
    re_path(
        r"^api/attempts/(?P<attempt_id>[0-9]+)/result$",
        views.attempt_result_view,
        name="attempt-result",
    ),
    re_path(r"^api/quizzes/(?P<quiz_id>[0-9]+)/attempts$", views.quiz_attempts_view, name="quiz-attempts"),
    re_path(
        r"^api/quizzes/(?P<quiz_id>[0-9]+)/leaderboard$",
        views.quiz_leaderboard_view,
        name="quiz-leaderboard",
    ),
    re_path(r"^api/statistics/me$", views.my_statistics_view, name="statistics-me"),
]
