from typing import Dict


MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "group_fallback": "Group {index}",
        "congrats_fallback": "Congratulations {name}!",
        "csv_group": "Group",
        "csv_name": "Name",
        "empty_pool": "Everyone has been drawn. Reset the draw or allow repeat winners.",
        "busy": "A draw is already in progress.",
        "empty_roster": "The roster is empty. Add participants first.",
    },
    "ko": {
        "group_fallback": "{index}조",
        "congrats_fallback": "{name}님, 축하합니다!",
        "csv_group": "조",
        "csv_name": "이름",
        "empty_pool": "명단을 모두 추첨했습니다. 초기화하거나 중복 당첨을 허용하세요.",
        "busy": "이미 추첨이 진행 중입니다.",
        "empty_roster": "명단이 비어 있습니다. 먼저 참가자를 추가하세요.",
    },
    "zh-TW": {
        "group_fallback": "第 {index} 組",
        "congrats_fallback": "恭喜 {name} 獲得大獎！太幸運了！",
        "csv_group": "組別",
        "csv_name": "姓名",
        "empty_pool": "名單已抽完！請重置或切換為可重複抽取。",
        "busy": "抽獎進行中。",
        "empty_roster": "名單目前為空，請先添加參與者。",
    },
}


def message(key: str, locale: str = "en", **kwargs) -> str:
    table = MESSAGES.get(locale) or MESSAGES["en"]
    template = table.get(key) or MESSAGES["en"][key]
    return template.format(**kwargs)
