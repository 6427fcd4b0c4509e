"""Tests for the HTTP mapping of the post operations."""

import pytest
from fastapi.testclient import TestClient

from forum_api.app.main import app


@pytest.fixture
def client():
    return TestClient(app)


def _auth(user):
    return {"Authorization": f"Bearer {user['token']}"}


def test_list_posts(client, alice, make_post):
    for i in range(5):
        make_post(alice, title="Post %d" % i, featured=True)

    response = client.get("/api/v1/posts", params={"featured": "true", "page": 2})

    assert response.status_code == 200
    data = response.json()
    assert [post["title"] for post in data["posts"]] == ["Post 4"]
    assert data["total_posts"] == 5
    assert data["total_pages"] == 2


def test_list_posts_requires_featured(client):
    response = client.get("/api/v1/posts")
    assert response.status_code == 422


def test_get_post_not_found(client):
    response = client.get("/api/v1/posts/unknown")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "POST_NOT_FOUND"


def test_get_user_posts_malformed_id(client):
    response = client.get("/api/v1/users/42/posts")
    assert response.status_code == 404
    assert response.json()["detail"] == {
        "code": "USER_NOT_FOUND",
        "message": "User doesn't exist check authentication",
    }


def test_get_user_posts(client, alice, make_post):
    make_post(alice, title="Mine")
    response = client.get(f"/api/v1/users/{alice['id']}/posts")
    assert response.status_code == 200
    assert [post["title"] for post in response.json()["posts"]] == ["Mine"]


def test_create_post(client, alice):
    response = client.post(
        "/api/v1/posts",
        json={"title": "Title", "body": "Body", "tags": [{"name": "python"}]},
        headers=_auth(alice),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "alice"
    assert data["tags"] == [{"name": "python"}]
    assert data["vote_count"] == 0
    assert client.get(f"/api/v1/posts/{data['id']}").status_code == 200


def test_create_post_without_token(client):
    response = client.post("/api/v1/posts", json={"title": "T", "body": "B", "tags": []})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["detail"]["code"] == "UNAUTHENTICATED"


def test_create_post_with_blank_title(client, alice):
    response = client.post(
        "/api/v1/posts",
        json={"title": " ", "body": "B", "tags": [{"name": "x"}]},
        headers=_auth(alice),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "code": "BAD_USER_INPUT",
        "message": "Post title must not be empty",
    }


def test_delete_post(client, alice, bob, make_post):
    post = make_post(alice)

    forbidden = client.delete(f"/api/v1/posts/{post.id}", headers=_auth(bob))
    assert forbidden.status_code == 403
    assert forbidden.json()["detail"]["code"] == "FORBIDDEN"

    deleted = client.delete(f"/api/v1/posts/{post.id}", headers=_auth(alice))
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Post deleted successfully"}

    missing = client.delete(f"/api/v1/posts/{post.id}", headers=_auth(alice))
    assert missing.status_code == 404


def test_upvote_and_downvote(client, alice, bob, make_post):
    post = make_post(alice)

    up = client.post(f"/api/v1/posts/{post.id}/upvote", headers=_auth(bob))
    assert up.status_code == 200
    assert up.json()["vote_count"] == 1
    assert [vote["username"] for vote in up.json()["upvotes"]] == ["bob"]

    down = client.post(f"/api/v1/posts/{post.id}/downvote", headers=_auth(bob))
    assert down.status_code == 200
    assert down.json()["vote_count"] == -1
    assert down.json()["upvotes"] == []


def test_vote_without_token(client, alice, make_post):
    post = make_post(alice)
    response = client.post(f"/api/v1/posts/{post.id}/upvote")
    assert response.status_code == 401


@pytest.mark.parametrize("page", ["nan", "inf", "-inf"])
def test_list_posts_non_finite_page(client, alice, make_post, page):
    for i in range(5):
        make_post(alice, title="Post %d" % i, featured=True)

    response = client.get("/api/v1/posts", params={"featured": "true", "page": page})

    assert response.status_code == 200
    assert [post["title"] for post in response.json()["posts"]] == ["Post 0", "Post 1", "Post 2", "Post 3"]


def test_list_posts_huge_page(client, alice, make_post):
    make_post(alice, featured=True)

    response = client.get("/api/v1/posts", params={"featured": "true", "page": "1e20"})

    assert response.status_code == 200
    data = response.json()
    assert data["posts"] == []
    assert data["total_posts"] == 1
