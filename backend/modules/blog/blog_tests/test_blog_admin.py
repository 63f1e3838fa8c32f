# -*- coding: utf-8 -*-
"""
博客后台页面测试
覆盖：分类列表、表单创建/编辑/删除、文章列表
"""

import pytest
from httpx import AsyncClient

from modules.blog.blog_services import BlogService
from tests.test_conftest import create_test_category, create_test_post

ADMIN = "/blog/admin"


class TestCategoryAdmin:
    """分类管理页面"""

    @pytest.mark.asyncio
    async def test_index_paginated(self, client: AsyncClient, blog_defaults):
        for i in range(6):
            await create_test_category(blog_defaults, f"Category {i}")

        response = await client.get(f"{ADMIN}/categories")
        assert response.status_code == 200
        # 每页 5 条，按ID倒序
        assert "Category 5" in response.text
        assert "Category 1" in response.text
        assert "Category 0" not in response.text
        assert "page=2" in response.text

        second = await client.get(f"{ADMIN}/categories", params={"page": 2})
        assert "Category 0" in second.text

    @pytest.mark.asyncio
    async def test_create_form(self, client: AsyncClient, blog_defaults):
        response = await client.get(f"{ADMIN}/categories/create")
        assert response.status_code == 200
        assert "1. 根分类" in response.text

    @pytest.mark.asyncio
    async def test_store_redirects(self, client: AsyncClient, blog_defaults):
        response = await client.post(f"{ADMIN}/categories", data={
            "title": "Technology",
            "slug": "",
            "parent_id": "1",
            "description": "All about tech"
        })
        assert response.status_code == 303
        assert "saved=1" in response.headers["location"]

        category = await BlogService(blog_defaults).get_category_by_slug("technology")
        assert category is not None
        assert category.parent_id == 1
        assert response.headers["location"].endswith(f"/categories/{category.id}/edit?saved=1")

        page = await client.get(response.headers["location"])
        assert "保存成功" in page.text

    @pytest.mark.asyncio
    async def test_store_title_too_short(self, client: AsyncClient, blog_defaults):
        response = await client.post(f"{ADMIN}/categories", data={"title": "abc", "parent_id": "1"})
        assert response.status_code == 422
        assert "标题长度需在 5-200 个字符之间" in response.text
        # 保留已填写的内容
        assert 'value="abc"' in response.text

    @pytest.mark.asyncio
    async def test_store_duplicate_title(self, client: AsyncClient, blog_defaults):
        await create_test_category(blog_defaults, "Technology")
        response = await client.post(f"{ADMIN}/categories", data={"title": "Technology"})
        assert response.status_code == 422
        assert "标题已存在" in response.text

    @pytest.mark.asyncio
    async def test_store_unknown_parent(self, client: AsyncClient, blog_defaults):
        response = await client.post(f"{ADMIN}/categories", data={"title": "Technology", "parent_id": "999"})
        assert response.status_code == 422
        assert "父分类不存在" in response.text

    @pytest.mark.asyncio
    async def test_store_slug_taken(self, client: AsyncClient, blog_defaults):
        await create_test_category(blog_defaults, "Something", slug="tech")
        response = await client.post(f"{ADMIN}/categories", data={"title": "Technology", "slug": "tech"})
        assert response.status_code == 422
        assert "该slug已被使用" in response.text

    @pytest.mark.asyncio
    async def test_edit_missing(self, client: AsyncClient, blog_defaults):
        response = await client.get(f"{ADMIN}/categories/999/edit")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_redirects(self, client: AsyncClient, blog_defaults):
        category = await create_test_category(blog_defaults, "Technology")
        response = await client.post(f"{ADMIN}/categories/{category.id}", data={
            "title": "Science and more",
            "slug": "",
            "parent_id": "1"
        })
        assert response.status_code == 303

        updated = await BlogService(blog_defaults).get_category(category.id)
        await blog_defaults.refresh(updated)
        assert updated.title == "Science and more"
        assert updated.slug == "science-and-more"

    @pytest.mark.asyncio
    async def test_update_self_parent(self, client: AsyncClient, blog_defaults):
        category = await create_test_category(blog_defaults, "Technology")
        response = await client.post(f"{ADMIN}/categories/{category.id}", data={
            "title": "Technology",
            "parent_id": str(category.id)
        })
        assert response.status_code == 422
        assert "分类不能作为自己的父分类" in response.text

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, blog_defaults):
        category = await create_test_category(blog_defaults, "Technology")
        response = await client.post(f"{ADMIN}/categories/{category.id}/delete")
        assert response.status_code == 303
        assert response.headers["location"].endswith("/blog/admin/categories?deleted=1")
        assert await BlogService(blog_defaults).get_category(category.id) is None

    @pytest.mark.asyncio
    async def test_delete_root_denied(self, client: AsyncClient, blog_defaults):
        response = await client.post(f"{ADMIN}/categories/1/delete")
        assert response.status_code == 422
        assert "不能删除根分类" in response.text

    @pytest.mark.asyncio
    async def test_delete_with_posts_denied(self, client: AsyncClient, blog_defaults):
        category = await create_test_category(blog_defaults, "Technology")
        await create_test_post(blog_defaults, "Hello", category.id)
        response = await client.post(f"{ADMIN}/categories/{category.id}/delete")
        assert response.status_code == 422
        assert "不能删除包含文章的分类" in response.text


class TestPostAdmin:
    """文章管理页面"""

    @pytest.mark.asyncio
    async def test_index(self, client: AsyncClient, blog_defaults):
        await create_test_post(blog_defaults, "A" * 60, 1, is_published=True)
        await create_test_post(blog_defaults, "Draft post", 1)

        response = await client.get(f"{ADMIN}/posts")
        assert response.status_code == 200
        assert "Draft post" in response.text
        assert "草稿" in response.text
        assert "已发布" in response.text
        # 长标题被截断
        assert "A" * 40 + "..." in response.text
