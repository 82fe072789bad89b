"""테스트 공용 데이터 / 헬퍼"""
