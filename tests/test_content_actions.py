from actions import catalog
from actions import members as member_actions
from actions import resources as resource_actions
from models import Resource
from queries.members import sort_sessions
from results import ErrorKind
from schemas import MemberCreate, MemberUpdate, ResourceCreate, ResourceStatusEnum


def _resource(admin_ctx, title="Algebra Notes", category="math", status=ResourceStatusEnum.PUBLISHED, **extra):
    payload = ResourceCreate(
        title=title,
        category=category,
        resource_type="pdf",
        resource_url="https://example.org/notes.pdf",
        status=status,
        **extra,
    )
    result = resource_actions.create_resource_action(admin_ctx, payload)
    assert result.success
    return result.data


def test_sessions_sort_newest_first_with_moderators_last():
    assert sort_sessions(["2019-20", "Moderators", "2023-24", "2009-10"]) == [
        "2023-24",
        "2019-20",
        "2009-10",
        "Moderators",
    ]


def test_about_groups_members_by_session_and_designation(admin_ctx, anon_ctx):
    for name, designation, session in (
        ("Karim", "Member", "2023-24"),
        ("Lamia", "General Secretary", "2023-24"),
        ("Omar", "President", "2023-24"),
        ("Tania", "President", "2022-23"),
        ("Zed", "Advisor", None),
    ):
        created = member_actions.create_member_action(
            admin_ctx, MemberCreate(name=name, designation=designation, session=session)
        )
        assert created.message == "Member created successfully"

    about = catalog.about_view(anon_ctx)
    assert about.success
    assert [group.session for group in about.data] == ["2023-24", "2022-23", "Unknown"]
    assert [m.name for m in about.data[0].members] == ["Omar", "Lamia", "Karim"]

    sessions = catalog.member_sessions_view(anon_ctx)
    assert sessions.data == ["2023-24", "2022-23"]


def test_member_update_and_delete_invalidate_about(admin_ctx, views):
    member = member_actions.create_member_action(admin_ctx, MemberCreate(name="Nabil", designation="Member")).data
    views.set("/about", {"cached": True})
    updated = member_actions.update_member_action(admin_ctx, member.id, MemberUpdate(designation="Treasurer"))
    assert updated.data.designation == "Treasurer"
    assert views.get("/about") is None

    deleted = member_actions.delete_member_action(admin_ctx, member.id)
    assert deleted.message == "Member deleted successfully"
    missing = member_actions.delete_member_action(admin_ctx, member.id)
    assert missing.error_kind == ErrorKind.NOT_FOUND


def test_public_resources_hide_pending_and_archived(db, admin_ctx, anon_ctx):
    visible = _resource(admin_ctx, title="Geometry Sheet")
    _resource(admin_ctx, title="Draft Sheet", status=ResourceStatusEnum.PENDING)
    archived = _resource(admin_ctx, title="Old Sheet")

    result = resource_actions.delete_resource_action(admin_ctx, archived.id)
    assert result.message == "Resource deleted successfully"
    assert db.query(Resource).filter(Resource.id == archived.id).one().is_archived is True

    listed = catalog.public_resources_view(anon_ctx)
    assert [r.title for r in listed.data] == [visible.title]
    admin_listed = catalog.admin_resources_view(admin_ctx)
    assert {r.title for r in admin_listed.data} == {"Geometry Sheet", "Draft Sheet"}


def test_resource_status_message_follows_new_status(admin_ctx):
    resource = _resource(admin_ctx, status=ResourceStatusEnum.PENDING)
    published = resource_actions.toggle_resource_status_action(admin_ctx, resource.id, ResourceStatusEnum.PUBLISHED)
    assert published.message == "Resource published successfully"
    pending = resource_actions.toggle_resource_status_action(admin_ctx, resource.id, ResourceStatusEnum.PENDING)
    assert pending.message == "Resource pending successfully"


def test_featured_toggle_twice_and_featured_listing(admin_ctx, anon_ctx):
    resource = _resource(admin_ctx)
    on = resource_actions.toggle_resource_featured_action(admin_ctx, resource.id, True)
    assert on.message == "Resource featured successfully"
    assert [r.id for r in catalog.public_resources_view(anon_ctx, featured_only=True).data] == [resource.id]

    off = resource_actions.toggle_resource_featured_action(admin_ctx, resource.id, False)
    assert off.data.is_featured is False
    assert catalog.public_resources_view(anon_ctx, featured_only=True).data == []


def test_category_listing(admin_ctx, anon_ctx):
    _resource(admin_ctx, title="Physics Lab", category="physics")
    _resource(admin_ctx, title="Algebra", category="math")
    result = catalog.category_resources_view(anon_ctx, "physics")
    assert [r.title for r in result.data] == ["Physics Lab"]


def test_anyone_can_record_a_view(db, admin_ctx, anon_ctx, views):
    resource = _resource(admin_ctx)
    views.set("/admin/resources", {"cached": True})
    for _ in range(3):
        assert resource_actions.increment_resource_view_action(anon_ctx, resource.id).success
    db.expire_all()
    assert db.query(Resource).filter(Resource.id == resource.id).one().view_count == 3
    assert views.get("/admin/resources") is None


def test_creator_is_stamped_on_resources(admin_ctx):
    resource = _resource(admin_ctx)
    assert resource.created_by == admin_ctx.identity.id
