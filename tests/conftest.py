import pytest

from case_records import parse_results


@pytest.fixture
def area_payload():
    return {
        "results": [
            {"countryName": "中国", "countryEnglishName": "China",
             "provinceName": "湖北省", "cities": [{"cityName": "武汉"}],
             "confirmedCount": 68000, "currentConfirmedCount": 100,
             "suspectedCount": 0, "curedCount": 63000, "deadCount": 4500,
             "updateTime": 1588000000000},
            {"countryName": "中国", "countryEnglishName": "China",
             "provinceName": "香港", "cities": [],
             "confirmedCount": 1000, "currentConfirmedCount": 50,
             "suspectedCount": 2, "curedCount": 900, "deadCount": 4,
             "updateTime": 1588000000000},
            {"countryName": "美国", "countryEnglishName": "United States of America",
             "confirmedCount": 1000000, "currentConfirmedCount": 800000,
             "suspectedCount": 0, "curedCount": 100000, "deadCount": 55000,
             "updateTime": 1588000000000},
            {"countryName": "阿联酋", "countryEnglishName": None,
             "confirmedCount": 10000, "currentConfirmedCount": 8000,
             "suspectedCount": 0, "curedCount": 2000, "deadCount": 80,
             "updateTime": 1588000000000},
            {"countryName": "钻石公主号邮轮", "countryEnglishName": "",
             "confirmedCount": 712, "currentConfirmedCount": 10,
             "suspectedCount": 0, "curedCount": 689, "deadCount": 13,
             "updateTime": 1588000000000},
            {"countryName": "德国", "countryEnglishName": "Germany",
             "confirmedCount": 150000, "currentConfirmedCount": 40000,
             "suspectedCount": 0, "curedCount": 100000, "deadCount": 6000,
             "updateTime": 1588000000000},
            {"countryName": "待明确地区", "countryEnglishName": None,
             "confirmedCount": 5, "currentConfirmedCount": 5,
             "suspectedCount": 0, "curedCount": 0, "deadCount": 0,
             "updateTime": 1588000000000},
        ]
    }


@pytest.fixture
def records(area_payload):
    return parse_results(area_payload)


@pytest.fixture
def countries_snapshot():
    return [
        {"name": "USA", "total": " 1,010,507 ", "active": "820,000",
         "increased": "+25,000", "recovered": "138,990", "dead": "56,803",
         "perMppl": "3,053"},
        {"name": "Germany", "total": "158,758", "active": "30,000",
         "increased": "1,000", "recovered": "120,400", "dead": "6,126",
         "perMppl": "1,895"},
        {"name": "S. Korea", "total": "10,752", "active": "1,000",
         "increased": "14", "recovered": "9,000", "dead": "0",
         "perMppl": ""},
        {"name": "", "total": "10", "active": "1",
         "increased": "0", "recovered": "9", "dead": "0", "perMppl": "1"},
    ]


@pytest.fixture
def world_geometry():
    def feature(name):
        return {"type": "Feature", "properties": {"name": name},
                "geometry": {"type": "Polygon",
                             "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}}

    return {"type": "FeatureCollection",
            "features": [feature(n) for n in
                         ("United States", "Germany", "Korea", "China", "Chad")]}
