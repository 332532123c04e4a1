"""레포지토리 계층 — 테이블별 쿼리.

Query layer, one module per aggregate (users and roles, vehicles,
templates, checklists, defects, sessions). Repositories flush; callers
commit.
"""
