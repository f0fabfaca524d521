"""Message board: post CRUD, image upload and the comment sub-resource."""


def create_post(client, title="hello", author="a@x.com", **extra):
    data = {"title": title, "content": "body", "category": "free", "author": author}
    resp = client.post("/api/posts", data=data, **extra)
    assert resp.status_code == 201, resp.text
    return next(p["id"] for p in client.get("/api/posts").json() if p["title"] == title)


def test_create_and_read_post(client):
    post_id = create_post(client)

    listing = client.get("/api/posts").json()
    assert listing[0]["id"] == post_id
    assert set(listing[0]) == {"id", "title", "author", "category", "created_at"}

    resp = client.get(f"/api/posts/{post_id}")
    assert resp.status_code == 200
    post = resp.json()
    assert post["title"] == "hello"
    assert post["content"] == "body"
    assert post["author"] == "a@x.com"
    assert post["category"] == "free"
    assert post["imageUrl"] is None
    assert post["created_at"]


def test_create_post_with_image_serves_it_back(client):
    png = b"\x89PNG\r\n\x1a\nfake-image-bytes"
    post_id = create_post(client, files={"image": ("cat.png", png, "image/png")})

    image_url = client.get(f"/api/posts/{post_id}").json()["imageUrl"]
    assert image_url.startswith("/uploads/")
    assert image_url.endswith(".png")
    assert "cat" not in image_url

    resp = client.get(image_url)
    assert resp.status_code == 200
    assert resp.content == png


def test_non_image_upload_is_400_and_creates_nothing(client):
    data = {"title": "script", "content": "body", "category": "free", "author": "a@x.com"}
    resp = client.post("/api/posts", data=data, files={"image": ("run.sh", b"#!/bin/sh", "text/plain")})

    assert resp.status_code == 400
    assert client.get("/api/posts").json() == []


def test_create_post_without_title_is_400(client):
    resp = client.post("/api/posts", data={"content": "body", "author": "a@x.com"})
    assert resp.status_code == 400


def test_update_post(client):
    post_id = create_post(client)

    resp = client.put(f"/api/posts/{post_id}", json={"title": "edited", "content": "new body"})
    assert resp.status_code == 200

    post = client.get(f"/api/posts/{post_id}").json()
    assert post["title"] == "edited"
    assert post["content"] == "new body"


def test_delete_post_removes_its_comments(client):
    post_id = create_post(client)
    client.post(f"/api/posts/{post_id}/comments", json={"author": "b@x.com", "content": "nice"})

    resp = client.delete(f"/api/posts/{post_id}")
    assert resp.status_code == 200
    assert client.get(f"/api/posts/{post_id}").status_code == 404
    assert client.get(f"/api/posts/{post_id}/comments").status_code == 404


def test_missing_post_is_404_everywhere(client):
    assert client.get("/api/posts/999").status_code == 404
    assert client.put("/api/posts/999", json={"title": "t", "content": "c"}).status_code == 404
    assert client.delete("/api/posts/999").status_code == 404


# ---- comments ----

def test_comment_lifecycle(client):
    post_id = create_post(client)

    resp = client.post(f"/api/posts/{post_id}/comments", json={"author": "b@x.com", "content": "first!"})
    assert resp.status_code == 200

    comments = client.get(f"/api/posts/{post_id}/comments").json()
    assert len(comments) == 1
    comment = comments[0]
    assert comment["post_id"] == post_id
    assert comment["author"] == "b@x.com"
    assert comment["content"] == "first!"

    resp = client.put(f"/api/posts/{post_id}/comments/{comment['id']}", json={"content": "second?"})
    assert resp.status_code == 200
    assert client.get(f"/api/posts/{post_id}/comments").json()[0]["content"] == "second?"

    resp = client.delete(f"/api/posts/{post_id}/comments/{comment['id']}")
    assert resp.status_code == 200
    assert client.get(f"/api/posts/{post_id}/comments").json() == []


def test_comment_requires_author_and_content(client):
    post_id = create_post(client)

    resp = client.post(f"/api/posts/{post_id}/comments", json={"author": "b@x.com"})
    assert resp.status_code == 400
    resp = client.post(f"/api/posts/{post_id}/comments", json={"content": "anon"})
    assert resp.status_code == 400


def test_comment_on_missing_post_is_404(client):
    resp = client.post("/api/posts/999/comments", json={"author": "b@x.com", "content": "hi"})
    assert resp.status_code == 404
    assert client.get("/api/posts/999/comments").status_code == 404


def test_comment_must_belong_to_post(client):
    first = create_post(client, title="first")
    second = create_post(client, title="second")
    client.post(f"/api/posts/{first}/comments", json={"author": "b@x.com", "content": "on first"})
    comment_id = client.get(f"/api/posts/{first}/comments").json()[0]["id"]

    assert client.delete(f"/api/posts/{second}/comments/{comment_id}").status_code == 404
    assert client.put(f"/api/posts/{second}/comments/{comment_id}", json={"content": "x"}).status_code == 404
    assert client.delete(f"/api/posts/{first}/comments/{comment_id}").status_code == 200
