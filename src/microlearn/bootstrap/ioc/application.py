from dishka import Provider, Scope, WithParents, provide, provide_all

from microlearn.application.assignment import CourseAssignmentService
from microlearn.application.auth_context import AuthContext
from microlearn.application.interactors.auth.ensure_superadmin import (
    EnsureSuperAdminInteractor,
)
from microlearn.application.interactors.auth.get_principal import (
    GetPrincipalInteractor,
)
from microlearn.application.interactors.auth.login import (
    AdminLoginInteractor,
    LearnerLoginInteractor,
    LogoutInteractor,
)
from microlearn.application.interactors.auth.register_admin import (
    RegisterAdminInteractor,
)
from microlearn.application.interactors.catalog.create_course import (
    CreateCourseInteractor,
)
from microlearn.application.interactors.catalog.get_course import (
    GetCourseInteractor,
)
from microlearn.application.interactors.catalog.list_courses import (
    ListCoursesInteractor,
)
from microlearn.application.interactors.catalog.set_course_visibility import (
    SetCourseVisibilityInteractor,
)
from microlearn.application.interactors.catalog.update_course_status import (
    UpdateCourseStatusInteractor,
)
from microlearn.application.interactors.enrollment.assign_course import (
    AssignCourseInteractor,
)
from microlearn.application.interactors.enrollment.assign_course_bulk import (
    AssignCourseBulkInteractor,
)
from microlearn.application.interactors.enrollment.check_assignment import (
    CheckAssignmentInteractor,
)
from microlearn.application.interactors.enrollment.get_enrollments import (
    GetEnrollmentsInteractor,
)
from microlearn.application.interactors.enrollment.remove_enrollment import (
    RemoveEnrollmentInteractor,
)
from microlearn.application.interactors.enrollment.suspend_enrollment import (
    SuspendEnrollmentInteractor,
)
from microlearn.application.interactors.enrollment.update_progress import (
    UpdateProgressInteractor,
)
from microlearn.application.interactors.learner.create_learner import (
    CreateLearnerInteractor,
)
from microlearn.application.interactors.learner.get_learners import (
    GetLearnersInteractor,
)
from microlearn.application.interactors.learner.get_registrations import (
    GetRegistrationsInteractor,
)
from microlearn.application.interactors.learner.import_learners import (
    ImportLearnersInteractor,
)
from microlearn.application.interactors.learner.review_registration import (
    ReviewRegistrationInteractor,
)
from microlearn.application.interactors.learner.set_learner_status import (
    SetLearnerStatusInteractor,
)
from microlearn.application.interactors.learner.submit_registration import (
    SubmitRegistrationInteractor,
)


class ApplicationProvider(Provider):
    scope = Scope.REQUEST

    auth_context = provide(WithParents[AuthContext])
    assignment_service = provide(CourseAssignmentService)

    interactors = provide_all(
        AdminLoginInteractor,
        LearnerLoginInteractor,
        LogoutInteractor,
        GetPrincipalInteractor,
        RegisterAdminInteractor,
        EnsureSuperAdminInteractor,
        ListCoursesInteractor,
        GetCourseInteractor,
        CreateCourseInteractor,
        UpdateCourseStatusInteractor,
        SetCourseVisibilityInteractor,
        AssignCourseInteractor,
        CheckAssignmentInteractor,
        AssignCourseBulkInteractor,
        UpdateProgressInteractor,
        SuspendEnrollmentInteractor,
        RemoveEnrollmentInteractor,
        GetEnrollmentsInteractor,
        CreateLearnerInteractor,
        GetLearnersInteractor,
        SetLearnerStatusInteractor,
        ImportLearnersInteractor,
        SubmitRegistrationInteractor,
        ReviewRegistrationInteractor,
        GetRegistrationsInteractor,
    )
