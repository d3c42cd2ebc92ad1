"""End-to-end binding: route, loader, resolver, handler call."""

import asyncio

from smartbind import (
    ArgumentResolver,
    BindableController,
    BindingRegistry,
    ResourceLoader,
    ResourceMap,
    Route,
    bind,
)


class HttpContext:
    def __init__(self):
        self.resources = ResourceMap()


class User:
    def __init__(self, name):
        self.name = name
        self.posts = {}


class Post:
    def __init__(self, ident, author):
        self.ident = ident
        self.author = author
        self.comments = {}


class Comment:
    def __init__(self, ident, post):
        self.ident = ident
        self.post = post


def build_store():
    alice = User("alice")
    post = Post("10", alice)
    alice.posts[post.ident] = post
    post.comments["3"] = Comment("3", post)
    return {"alice": alice}


registry = BindingRegistry()


class CommentsController(BindableController):
    __smartbind_registry__ = registry

    @bind()
    def show(self, ctx: HttpContext, user: User, post: Post, comment: Comment):
        return f"{user.name}/{post.ident}/{comment.ident}"


def test_three_level_scoped_binding():
    users = build_store()

    def find(param, value, parent):
        if param.name == "user":
            return users.get(value)
        if param.name == "post":
            return parent.posts.get(value)
        return parent.comments.get(value)

    route = Route(
        "/users/:user(name)/posts/:>post/comments/:>comment",
        (CommentsController, "show"),
    ).prepare()
    assert [p.parent for p in route.params] == [None, "user", "post"]

    async def dispatch():
        ctx = HttpContext()
        matched = route.match({"user": "alice", "post": "10", "comment": "3"})
        await ResourceLoader(find).load(matched, ctx.resources)
        args = await ArgumentResolver(registry).resolve_arguments(ctx, matched)
        return CommentsController().show(*args)

    assert asyncio.run(dispatch()) == "alice/10/3"
