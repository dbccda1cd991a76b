from drf_spectacular.generators import SchemaGenerator


def _first_tags(paths, path):
    return next(iter(paths[path].values())).get("tags")


def test_schema_tag_grouping(db):
    generator = SchemaGenerator()
    schema = generator.get_schema(request=None, public=True)
    paths = schema["paths"]

    assert _first_tags(paths, "/api/v1/employees/") == ["Employees"]
    assert _first_tags(paths, "/api/v1/orgcharts/") == ["Org Chart Profiles"]
    assert _first_tags(paths, "/api/v1/orgchart/nodes/") == ["Org Chart"]
    assert _first_tags(paths, "/api/v1/audit/recent/") == ["Audit"]
    assert _first_tags(paths, "/api/v1/auth/jwt/create/") == ["Authentication"]
    assert _first_tags(paths, "/api/v1/users/") == ["Users"]
