from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class MaxRule(BaseModel):
    max: int = Field(gt=0)


class PostRules(BaseModel):
    title: MaxRule
    desc: MaxRule
    body: MaxRule
    slug_fallback: str = "post"


class LinkRelRules(BaseModel):
    noopener: bool = True
    noreferrer: bool = True
    ugc: bool = False


class SanitizerRules(BaseModel):
    allow_tags: list[str]
    allow_attrs: dict[str, list[str]] = Field(default_factory=dict)
    drop_content_tags: list[str] = Field(default_factory=list)
    forbid_protocols: list[str]
    link_rel: LinkRelRules = Field(default_factory=LinkRelRules)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    posts: PostRules
    sanitizer: SanitizerRules
    ops: OpsRules = Field(default_factory=OpsRules)
