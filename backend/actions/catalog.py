"""Read views behind the cached paths (public pages and admin lists)."""

from actions.common import ActionContext, run_action
from queries import competitions as competition_queries
from queries import events as event_queries
from queries import members as member_queries
from queries import resources as resource_queries
from results import QueryResult
from schemas import (
    CompetitionResponse,
    EventDetailResponse,
    EventListResponse,
    EventResponse,
    MemberResponse,
    ResourceResponse,
    SessionGroupResponse,
)


def _events_overview(db) -> QueryResult:
    upcoming = event_queries.list_upcoming_events(db)
    if not upcoming.success:
        return upcoming
    past = event_queries.list_past_events(db)
    if not past.success:
        return past
    return QueryResult.ok(
        EventListResponse(
            upcoming=[EventResponse.model_validate(e) for e in upcoming.data],
            past=[EventResponse.model_validate(e) for e in past.data],
        )
    )


def public_events_view(ctx: ActionContext):
    return run_action(
        ctx,
        lambda: _events_overview(ctx.db),
        require_auth=False,
        message="Events loaded",
        fallback="Failed to fetch events",
        present=lambda overview: overview,
    )


def _event_detail(db, event_id: str, published_only: bool) -> QueryResult:
    if published_only:
        found = event_queries.get_published_event(db, event_id)
    else:
        found = event_queries.get_event(db, event_id)
    if not found.success:
        return found
    competitions = competition_queries.list_event_competitions(db, event_id, published_only=published_only)
    if not competitions.success:
        return competitions
    detail = EventDetailResponse(
        **EventResponse.model_validate(found.data).model_dump(),
        competitions=[CompetitionResponse.model_validate(c) for c in competitions.data],
    )
    return QueryResult.ok(detail)


def public_event_view(ctx: ActionContext, event_id: str):
    return run_action(
        ctx,
        lambda: _event_detail(ctx.db, event_id, published_only=True),
        require_auth=False,
        message="Event loaded",
        fallback="Failed to fetch event",
        present=lambda detail: detail,
    )


def admin_events_view(ctx: ActionContext):
    return run_action(
        ctx,
        lambda: event_queries.list_all_events(ctx.db),
        permission="view events",
        message="Events loaded",
        fallback="Failed to fetch events",
        present=lambda events: [EventResponse.model_validate(e) for e in events],
    )


def admin_event_view(ctx: ActionContext, event_id: str):
    return run_action(
        ctx,
        lambda: _event_detail(ctx.db, event_id, published_only=False),
        permission="view events",
        message="Event loaded",
        fallback="Failed to fetch event",
        present=lambda detail: detail,
    )


def about_view(ctx: ActionContext):
    return run_action(
        ctx,
        lambda: member_queries.list_members_by_session(ctx.db),
        require_auth=False,
        message="Members loaded",
        fallback="Failed to fetch members by session",
        present=lambda grouped: [
            SessionGroupResponse(session=session, members=[MemberResponse.model_validate(m) for m in members])
            for session, members in grouped.items()
        ],
    )


def admin_members_view(ctx: ActionContext):
    return run_action(
        ctx,
        lambda: member_queries.list_members(ctx.db),
        permission="view members",
        message="Members loaded",
        fallback="Failed to fetch members",
        present=lambda members: [MemberResponse.model_validate(m) for m in members],
    )


def member_sessions_view(ctx: ActionContext):
    return run_action(
        ctx,
        lambda: member_queries.list_unique_sessions(ctx.db),
        require_auth=False,
        message="Sessions loaded",
        fallback="Failed to fetch sessions",
        present=lambda sessions: sessions,
    )


def _resource_list(resources):
    return [ResourceResponse.model_validate(r) for r in resources]


def public_resources_view(ctx: ActionContext, featured_only: bool = False):
    fetch = resource_queries.list_featured_resources if featured_only else resource_queries.list_published_resources
    return run_action(
        ctx,
        lambda: fetch(ctx.db),
        require_auth=False,
        message="Resources loaded",
        fallback="Failed to fetch resources",
        present=_resource_list,
    )


def category_resources_view(ctx: ActionContext, category: str):
    return run_action(
        ctx,
        lambda: resource_queries.list_resources_by_category(ctx.db, category),
        require_auth=False,
        message="Resources loaded",
        fallback="Failed to fetch resources",
        present=_resource_list,
    )


def admin_resources_view(ctx: ActionContext):
    return run_action(
        ctx,
        lambda: resource_queries.list_all_resources(ctx.db),
        permission="view resources",
        message="Resources loaded",
        fallback="Failed to fetch resources",
        present=_resource_list,
    )
