from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from starlette import status

from microlearn.application.interactors.learner.create_learner import (
    CreateLearnerInteractor,
    CreateLearnerRequest,
)
from microlearn.application.interactors.learner.get_learners import (
    GetLearnersInteractor,
    GetLearnersRequest,
)
from microlearn.application.interactors.learner.import_learners import (
    ImportLearnersInteractor,
    ImportLearnersRequest,
)
from microlearn.application.interactors.learner.set_learner_status import (
    SetLearnerStatusInteractor,
    SetLearnerStatusRequest,
)
from microlearn.domain.column_matching import match_columns
from microlearn.domain.learner import LearnerStatus
from microlearn.presentation.api.learners.schema import (
    CreateLearnerSchema,
    ImportLearnersResultSchema,
    ImportLearnersSchema,
    LearnerSchema,
    LearnerStatusSchema,
    MatchColumnsSchema,
    SkippedRowSchema,
)

learners_router = APIRouter()


@learners_router.get(
    "/",
    status_code=status.HTTP_200_OK,
)
@inject
async def get_learners(
    interactor: FromDishka[GetLearnersInteractor],
    learner_status: LearnerStatus | None = None,
    skip: int = 0,
    limit: int = 0,
) -> list[LearnerSchema]:
    learners = await interactor(
        GetLearnersRequest(status=learner_status, skip=skip, limit=limit),
    )
    return [LearnerSchema.model_validate(learner) for learner in learners]


@learners_router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
)
@inject
async def create_learner(
    request_data: CreateLearnerSchema,
    interactor: FromDishka[CreateLearnerInteractor],
) -> LearnerSchema:
    learner = await interactor(
        CreateLearnerRequest(
            name=request_data.name,
            phone=request_data.phone,
            email=request_data.email,
        ),
    )
    return LearnerSchema.model_validate(learner)


@learners_router.patch(
    "/{learner_id}/status",
    status_code=status.HTTP_200_OK,
)
@inject
async def set_learner_status(
    learner_id: str,
    request_data: LearnerStatusSchema,
    interactor: FromDishka[SetLearnerStatusInteractor],
) -> LearnerSchema:
    learner = await interactor(
        SetLearnerStatusRequest(
            learner_id=learner_id,
            status=request_data.status,
        ),
    )
    return LearnerSchema.model_validate(learner)


@learners_router.post(
    "/import/columns",
    status_code=status.HTTP_200_OK,
)
async def suggest_columns(
    request_data: MatchColumnsSchema,
) -> dict[str, str | None]:
    """Suggested learner field -> header mapping for an uploaded sheet"""
    return match_columns(request_data.headers)


@learners_router.post(
    "/import",
    status_code=status.HTTP_200_OK,
)
@inject
async def import_learners(
    request_data: ImportLearnersSchema,
    interactor: FromDishka[ImportLearnersInteractor],
) -> ImportLearnersResultSchema:
    result = await interactor(
        ImportLearnersRequest(
            rows=request_data.rows,
            column_mapping=request_data.column_mapping,
        ),
    )
    return ImportLearnersResultSchema(
        column_mapping=result.column_mapping,
        created=[
            LearnerSchema.model_validate(learner) for learner in result.created
        ],
        skipped=[
            SkippedRowSchema(row_number=row.row_number, reason=row.reason)
            for row in result.skipped
        ],
    )
