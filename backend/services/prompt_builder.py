"""All prompt templates for AI-assisted extraction calls."""


def _wrap(instruction: str, shape: str, resume_text: str, rules: list[str]) -> str:
    checklist = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, 1))
    return f"""{instruction}
{shape}

简历文本：
---
{resume_text}
---

请确保：
{checklist}
{len(rules) + 1}. 返回纯JSON格式，不要包含其他内容
"""


def build_basic_info_prompt(resume_text: str) -> str:
    return _wrap(
        "请从以下简历文本中提取基本信息，以JSON格式返回：",
        """{
  "name": "姓名",
  "email": "邮箱",
  "phone": "手机号",
  "wechat": "微信号",
  "qq": "QQ号",
  "address": "地址",
  "desired_position": "求职意向",
  "current_status": "当前状态",
  "summary": "个人简介"
}""",
        resume_text,
        [
            "只提取明确存在的信息，不要推测",
            "手机号格式为11位数字",
            "邮箱格式要正确",
            "如果某项信息不存在，请设为null",
        ],
    )


def build_education_prompt(resume_text: str) -> str:
    return _wrap(
        "请从以下简历文本中提取教育背景信息，以JSON数组格式返回：",
        """[
  {
    "school": "学校名称",
    "degree": "学历（博士/硕士/学士/专科/高中）",
    "major": "专业名称",
    "start_date": "开始时间",
    "end_date": "结束时间",
    "gpa": "绩点",
    "honors": ["荣誉1", "荣誉2"],
    "is_key_university": "是否为985/211高校（布尔值）"
  }
]""",
        resume_text,
        [
            "识别所有教育经历",
            "学历标准化为：博士、硕士、学士、专科、高中",
            "时间格式统一为YYYY-MM或YYYY，在读填写至今",
            "985/211高校标记为true",
        ],
    )


def build_experience_prompt(resume_text: str) -> str:
    return _wrap(
        "请从以下简历文本中提取工作经历信息，以JSON数组格式返回：",
        """[
  {
    "company": "公司名称",
    "position": "职位名称",
    "industry": "所属行业",
    "start_date": "开始时间",
    "end_date": "结束时间",
    "is_current": "是否当前工作（布尔值）",
    "location": "工作地点",
    "responsibilities": ["职责1", "职责2"],
    "achievements": ["成就1", "成就2"],
    "company_type": "公司类型（state_owned/private/foreign/startup）"
  }
]""",
        resume_text,
        [
            "识别所有工作经历",
            "区分职责和成就",
            "成就要包含量化数据",
            "公司类型准确分类",
        ],
    )


def build_projects_prompt(resume_text: str) -> str:
    return _wrap(
        "请从以下简历文本中提取项目经历信息，以JSON数组格式返回：",
        """[
  {
    "name": "项目名称",
    "description": "项目描述",
    "type": "项目类型（personal/team/commercial/academic/open_source）",
    "technologies": ["技术1", "技术2"],
    "role": "担任角色",
    "start_date": "开始时间",
    "end_date": "结束时间",
    "achievements": ["成就1", "成就2"],
    "url": "项目链接",
    "star_elements": {
      "situation": ["背景情况"],
      "task": ["任务要求"],
      "action": ["采取行动"],
      "result": ["取得结果"]
    }
  }
]""",
        resume_text,
        [
            "识别所有项目经历",
            "提取完整的技术栈",
            "分析STAR法则要素",
            "项目类型准确分类",
        ],
    )


def build_skills_prompt(resume_text: str) -> str:
    return _wrap(
        "请从以下简历文本中提取技能信息，以JSON格式返回：",
        """{
  "technical_skills": [
    {
      "category": "技能分类（如：编程语言、前端框架等）",
      "items": [
        {
          "name": "技能名称",
          "proficiency": "熟练度（beginner/intermediate/advanced/expert）",
          "years_experience": "使用年限（数字）"
        }
      ]
    }
  ],
  "soft_skills": ["软技能1", "软技能2"],
  "languages": [
    {
      "language": "语言名称",
      "proficiency": "熟练度（native/fluent/proficient/intermediate/basic）",
      "certificate": "相关证书"
    }
  ],
  "certifications": [
    {
      "name": "证书名称",
      "issuer": "发行机构",
      "issue_date": "颁发日期"
    }
  ]
}""",
        resume_text,
        [
            "技能分类要准确",
            "熟练度评估要合理",
            "识别所有相关证书",
            "技能去重",
        ],
    )


PROMPT_BUILDERS = {
    "basic_info": build_basic_info_prompt,
    "education": build_education_prompt,
    "work_experience": build_experience_prompt,
    "projects": build_projects_prompt,
    "skills": build_skills_prompt,
}
