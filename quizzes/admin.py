from django.contrib import admin

from .models import Choice, Question, Quiz, QuizAttempt, UserAnswer, UserStatistics


class ChoiceInline(admin.TabularInline):
    model = Choice
    extra = 0


class QuestionInline(admin.StackedInline):
    model = Question
    extra = 0
    show_change_link = True


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "is_active", "created_by", "created_at")
    search_fields = ("title", "created_by__username")
    list_filter = ("is_active", "created_at")
    inlines = [QuestionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "quiz", "position", "text")
    search_fields = ("text", "quiz__title")
    list_filter = ("quiz",)
    inlines = [ChoiceInline]


class UserAnswerInline(admin.TabularInline):
    model = UserAnswer
    extra = 0
    can_delete = False
    readonly_fields = ("question", "choice", "correct_choice", "is_correct", "answered_at")

    def has_add_permission(self, request, obj=None) -> bool:
        return False


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "quiz",
        "score",
        "question_count",
        "started_at",
        "completed_at",
    )
    search_fields = ("quiz__title", "user__username", "user__email")
    list_filter = ("completed_at", "started_at")
    readonly_fields = ("score", "question_count", "started_at", "completed_at")
    inlines = [UserAnswerInline]


@admin.register(UserStatistics)
class UserStatisticsAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "total_attempts", "average_score", "updated_at")
    search_fields = ("user__username", "user__email")
    readonly_fields = ("total_attempts", "average_score", "updated_at")
