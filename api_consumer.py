"""Municipality Tax API 사용 예제 스크립트

서버를 먼저 실행한 뒤 사용합니다.

사용법:
    python -m municipal_tax.api.main
    python api_consumer.py
"""

import json

import requests

# API 베이스 URL
BASE_URL = "http://localhost:5000/api"


def get_tax(municipality_name, tax_date):
    """세율 조회"""
    print(f"\n=== {municipality_name} {tax_date} 세율 조회 ===")
    try:
        response = requests.get(f"{BASE_URL}/Tax/{municipality_name}/{tax_date}")
        print(f"Status: {response.status_code}")

        if response.status_code == 200:
            data = response.json()
            print(f"지자체: {data['municipality']}, 날짜: {data['date']}, 세율: {data['tax']}")
            if data.get('rule_id'):
                print(f"  적용 규칙: #{data['rule_id']} ({data['recurrence_kind']})")
            return True
        else:
            print(f"Error: {response.text}")
            return response.status_code == 404

    except requests.RequestException as e:
        print(f"Error: {e}")
        return False


def add_tax_rule(payload):
    """세율 규칙 추가"""
    print(f"\n=== 규칙 추가: {payload['municipality_name']} ({payload['recurrence_kind']}) ===")
    try:
        response = requests.post(f"{BASE_URL}/Municipality/taxrule", json=payload)
        print(f"Status: {response.status_code}")
        print(f"Response: {json.dumps(response.json(), indent=2, ensure_ascii=False)}")
        if response.status_code == 201:
            return response.json()['id']
        return None

    except requests.RequestException as e:
        print(f"Error: {e}")
        return None


def update_tax_rule(rule_id, payload):
    """세율 규칙 수정"""
    print(f"\n=== 규칙 수정: #{rule_id} ===")
    try:
        response = requests.put(
            f"{BASE_URL}/Municipality/taxrule",
            json={"id": rule_id, **payload}
        )
        print(f"Status: {response.status_code}")
        print(f"Response: {json.dumps(response.json(), indent=2, ensure_ascii=False)}")
        return response.status_code == 200

    except requests.RequestException as e:
        print(f"Error: {e}")
        return False


def import_tax_rules(file_path, file_source_type="Local"):
    """CSV 파일 일괄 가져오기"""
    print(f"\n=== 규칙 가져오기: {file_path} ({file_source_type}) ===")
    try:
        response = requests.post(
            f"{BASE_URL}/Municipality/import-tax-rules",
            params={"filePath": file_path, "fileSourceType": file_source_type}
        )
        print(f"Status: {response.status_code}")

        if response.status_code == 200:
            data = response.json()
            print(data['message'])
            for failure in data['failures']:
                print(f"  - {failure['row_number']}행 ({failure['municipality_name']}): {failure['reason']}")
            return True
        else:
            print(f"Error: {response.text}")
            return False

    except requests.RequestException as e:
        print(f"Error: {e}")
        return False


def main():
    """예제 실행"""
    print("=" * 60)
    print("Municipality Tax API 예제")
    print("=" * 60)

    results = []

    # 1. 시드 규칙 조회
    results.append(("Copenhagen 연간", get_tax("Copenhagen", "2024.03.16")))
    results.append(("Copenhagen 매월 1일", get_tax("Copenhagen", "2024.02.01")))
    results.append(("Copenhagen 특정일", get_tax("Copenhagen", "2024.01.01")))
    results.append(("Roskilde 월요일 아님", get_tax("Roskilde", "2024.01.02")))
    results.append(("Roskilde 월요일", get_tax("Roskilde", "2024.01.08")))
    results.append(("없는 지자체", get_tax("NonExistentCity", "2024.03.15")))

    # 2. 규칙 추가
    daily = {
        "municipality_name": "Bangalore",
        "recurrence_kind": "Daily",
        "tax_value": "0.08",
        "start_date": "2024-06-15",
        "end_date": "2024-06-15"
    }
    rule_id = add_tax_rule(daily)
    results.append(("규칙 추가", rule_id is not None))
    results.append(("Bangalore 조회", get_tax("Bangalore", "2024.06.15")))

    # 3. 규칙 수정
    if rule_id is not None:
        results.append(("규칙 수정", update_tax_rule(rule_id, {**daily, "tax_value": "0.09"})))
        results.append(("수정 후 조회", get_tax("Bangalore", "2024.06.15")))

    # 4. 일괄 가져오기
    results.append(("CSV 가져오기", import_tax_rules("municipal_tax/rules/indian_tax_rules.csv")))
    results.append(("Delhi 독립기념일", get_tax("Delhi", "2024.08.15")))
    results.append(("Chennai 화요일", get_tax("Chennai", "2024.01.09")))

    # 결과 요약
    print("\n" + "=" * 60)
    print("결과 요약")
    print("=" * 60)
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"{name:30s} {status}")

    total = len(results)
    passed = sum(1 for _, p in results if p)
    print(f"\n총 {total}개 중 {passed}개 성공")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n중단됨")
