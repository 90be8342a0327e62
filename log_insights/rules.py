"""Static classification tables and the two matching strategies.

Intent classification is single-label: patterns are tried in declaration
order and the first hit wins. Metal and keyword counting is multi-label:
every term contained in the content is counted independently.
"""

import re
from typing import Iterable

FALLBACK_INTENT = "其他"

INTENT_RULES = (
    ("闲聊/问候", re.compile(r"你好|早上好|晚上好|谢谢|感谢|再见|hello|hi|哈哈|牛|厉害|智障|笨蛋|测试|谁|帮助", re.IGNORECASE)),
    ("行情/价格", re.compile(r"价格|多少钱|报价|升贴水|价|结算|多少|钱|花费|行情", re.IGNORECASE)),
    ("趋势/预测", re.compile(r"走势|涨|跌|预测|后市|看法|分析|展望|趋势|动向", re.IGNORECASE)),
    ("数据/库存", re.compile(r"库存|仓单|产量|产能|进出口|表|数据|图|排产|开工率|销量|平衡表", re.IGNORECASE)),
    ("知识/百科", re.compile(r"是什么|定义|标准|工艺|介绍|牌号|区别|含义|科普", re.IGNORECASE)),
)

INTENT_LABELS = tuple(label for label, _ in INTENT_RULES) + (FALLBACK_INTENT,)

METAL_TERMS = (
    "铜", "铝", "锌", "铅", "镍", "锡",
    "锂", "钴", "不锈钢", "金", "银",
    "稀土", "钨", "钼", "硅", "镁", "锰",
    "钛", "铬", "铟", "镓", "锗", "铼",
    "钒", "锆", "铪", "钽", "铌", "铂",
    "钯", "铑", "铱", "钌", "锇",
    "碳酸锂", "氢氧化锂", "磷酸铁锂", "六氟磷酸锂", "电解液",
    "三元", "光伏", "多晶硅", "硅片", "电池", "组件", "EVA", "POE",
    "废钢", "废铜", "废铝", "石油焦", "阳极", "黑粉", "碳酸酯", "氧化铝",
)

# Business-intent phrases; metals are deliberately absent (they have their own table).
KEYWORD_TERMS = (
    "价格", "库存", "走势", "涨", "跌", "预测",
    "结算", "加工费", "升贴水", "现货", "期货",
    "产量", "消费", "废", "再生", "月度", "年度",
    "成本", "利润", "供需", "产能", "开工率",
    "报价", "均价", "指数", "进口", "出口",
    "政策", "宏观", "美联储", "降息", "汇率",
    "行情", "分析", "数据", "报表", "日报", "周报",
    "多少钱", "LME", "SHFE", "长江", "SMM", "排产", "销量",
)

# Lower-case markers matched against the lower-cased identity fields.
INTERNAL_MARKERS = ("smm", "上海有色网")
INTERNAL_LABEL = "上海有色网 (SMM)"

USER_TYPE_INTERNAL = "内部员工"
USER_TYPE_EXTERNAL = "外部客户"
USER_TYPE_UNKNOWN = "未知"
USER_TYPE_LABELS = (USER_TYPE_INTERNAL, USER_TYPE_EXTERNAL, USER_TYPE_UNKNOWN)


def match_intent(content: str) -> str:
    """Return the label of the first intent pattern found in content, else the fallback."""
    for label, pattern in INTENT_RULES:
        if pattern.search(content):
            return label
    return FALLBACK_INTENT


def count_terms(contents: Iterable[str], terms: Iterable[str]) -> list[tuple[str, int]]:
    """Count, per term, how many contents contain it as a substring.

    Zero counts are dropped; the rest are sorted by count descending with
    ties kept in table order.
    """
    terms = tuple(terms)
    counts = dict.fromkeys(terms, 0)
    for content in contents:
        for term in terms:
            if term in content:
                counts[term] += 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [(term, count) for term, count in ranked if count > 0]


def is_internal(company: str, user_name: str, nickname: str, email: str) -> bool:
    """True if any identity field carries an organization marker (case-insensitive)."""
    haystack = " ".join((company, user_name, nickname, email)).lower()
    return any(marker in haystack for marker in INTERNAL_MARKERS)
